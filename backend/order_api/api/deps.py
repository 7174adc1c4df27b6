"""API dependencies - authentication and authorization"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Callable, Optional

from order_api.core.database import get_db
from order_api.core.security import decode_access_token
from order_api.core.exceptions import AuthenticationError, AuthorizationError
from order_api.models.role import RoleName
from order_api.models.user import User
from order_api.services.auth_service import AuthService, auth_service
from order_api.services.user_service import user_service

# HTTP Bearer token scheme; missing header is reported as our own 401
security = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthService:
    return auth_service


def get_client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the caller's identity from the bearer access token

    The returned user is passed explicitly to whatever needs it; nothing
    is stored in request-global state.

    Raises:
        AuthenticationError: If token is missing, invalid, or the user is gone
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    email: Optional[str] = payload.get("sub")
    if not email:
        raise AuthenticationError("Invalid token payload")

    user = user_service.get_user_by_email(db, email)
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is disabled")

    return user


def require_roles(*roles: RoleName) -> Callable[..., User]:
    """
    Build a dependency that admits callers holding any of ``roles``

    Raises:
        AuthorizationError: If the caller holds none of them
    """
    allowed = {role.value for role in roles}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if allowed.isdisjoint(current_user.role_names):
            raise AuthorizationError()
        return current_user

    return dependency
