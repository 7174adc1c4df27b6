"""Authentication façade: login, refresh and logout."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from order_api.core.exceptions import (
    AuthenticationError,
    InvalidCredentialsError,
    TokenExpiredError,
)
from order_api.core.metrics import AUTH_EVENTS
from order_api.core.validation import (
    normalize_email,
    raise_for_errors,
    validate_login,
    validate_refresh,
)
from order_api.models.user import User
from order_api.services.audit_service import AuditService, audit_service
from order_api.services.token_issuer import TokenPair
from order_api.services.token_service import TokenService, token_service
from order_api.services.user_service import UserService, user_service

logger = logging.getLogger(__name__)


class AuthService:
    """
    Orchestrates credential verification, token issuance and the token store.

    Failures are reported as ``InvalidCredentialsError``,
    ``UnauthorizedError`` or ``TokenExpiredError`` only; which internal
    check failed is logged, never returned.
    """

    def __init__(
        self,
        users: UserService = user_service,
        tokens: TokenService = token_service,
        audit: AuditService = audit_service,
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.audit = audit

    def login(
        self,
        db: Session,
        email: str,
        password: str,
        client_ip: Optional[str] = None,
    ) -> TokenPair:
        """
        Verify credentials and start a new session.

        Nothing is persisted unless verification succeeds.
        """
        raise_for_errors(validate_login(email, password))
        email = normalize_email(email)

        try:
            user = self.users.authenticate_user(db, email, password)
        except InvalidCredentialsError:
            self._record(db, "login", "failure", ip=client_ip, metadata={"email": email})
            raise

        pair = self.tokens.start_session(db, user)
        self._record(db, "login", "success", user_id=user.id, ip=client_ip)
        return pair

    def refresh_session(
        self,
        db: Session,
        email: str,
        refresh_token: str,
        client_ip: Optional[str] = None,
    ) -> TokenPair:
        """Exchange a live refresh token for a new pair (rotation)."""
        raise_for_errors(validate_refresh(email, refresh_token))
        email = normalize_email(email)

        try:
            pair = self.tokens.refresh(db, email, refresh_token)
        except AuthenticationError as exc:
            outcome = "expired" if isinstance(exc, TokenExpiredError) else "unauthorized"
            self._record(db, "refresh", outcome, ip=client_ip, metadata={"email": email})
            raise

        self._record(db, "refresh", "success", ip=client_ip, metadata={"email": email})
        return pair

    def logout(
        self,
        db: Session,
        user: User,
        refresh_token: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> bool:
        revoked = self.tokens.revoke(db, user, refresh_token)
        self._record(
            db,
            "logout",
            "success" if revoked else "noop",
            user_id=user.id,
            ip=client_ip,
        )
        return revoked

    def _record(
        self,
        db: Session,
        event: str,
        outcome: str,
        *,
        user_id: Optional[int] = None,
        ip: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        AUTH_EVENTS.labels(event, outcome).inc()
        if outcome != "success":
            logger.info("Auth %s rejected (%s) ip=%s", event, outcome, ip or "unknown")
        self.audit.log_event(
            db,
            action=event,
            outcome=outcome,
            user_id=user_id,
            ip_address=ip,
            metadata=metadata,
        )


auth_service = AuthService()
