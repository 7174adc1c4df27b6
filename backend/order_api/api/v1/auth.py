"""Authentication routes"""

from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.orm import Session
from typing import Optional

from order_api.core.database import get_db
from order_api.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, LogoutRequest, LogoutResponse
from order_api.schemas.response import ErrorResponse
from order_api.schemas.user import UserResponse
from order_api.services.auth_service import AuthService
from order_api.services.rate_limiter import rate_limiter
from order_api.api.deps import get_auth_service, get_client_ip, get_current_user
from order_api.models.user import User

router = APIRouter()

_AUTH_ERRORS = {
    401: {"model": ErrorResponse, "description": "Unauthorized"},
    422: {"model": ErrorResponse, "description": "Invalid arguments"},
    429: {"model": ErrorResponse, "description": "Too many attempts"},
}


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    responses=_AUTH_ERRORS,
)
def login(
    credentials: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Authenticate with email and password and open a session

    Returns:
        Access token, refresh token and their timestamps
    """
    client_ip = get_client_ip(request)
    rate_limiter.check_login(client_ip, credentials.email)

    pair = auth.login(db, credentials.email, credentials.password, client_ip=client_ip)
    return TokenResponse.from_pair(pair)


@router.put("/refresh", response_model=TokenResponse, responses=_AUTH_ERRORS)
def refresh_token(
    body: RefreshRequest,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Exchange a refresh token for a new token pair

    The presented refresh token stops working once this call succeeds.
    """
    client_ip = get_client_ip(request)
    rate_limiter.check_refresh(client_ip)

    pair = auth.refresh_session(db, body.email, body.refresh_token, client_ip=client_ip)
    return TokenResponse.from_pair(pair)


@router.post("/logout", response_model=LogoutResponse, status_code=status.HTTP_200_OK)
def logout(
    request: Request,
    body: Optional[LogoutRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Revoke the caller's refresh token

    If a body is sent, its refresh token must be the caller's live one.
    """
    presented = body.refresh_token if body else None
    revoked = auth.logout(db, current_user, presented, client_ip=get_client_ip(request))
    return LogoutResponse(
        success=True,
        message="Logged out successfully",
        refresh_token_revoked=revoked,
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Identity behind the presented access token"""
    return UserResponse.from_user(current_user)
