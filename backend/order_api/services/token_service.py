"""Refresh token rotation and revocation service."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from order_api.config import settings
from order_api.core.clock import Clock
from order_api.core.exceptions import (
    RefreshTokenNotFoundError,
    TokenExpiredError,
    UnauthorizedError,
)
from order_api.core.locks import KeyedLock, session_locks
from order_api.core.security import as_utc, hash_refresh_token, tokens_match
from order_api.core.validation import normalize_email
from order_api.models.user import User
from order_api.repositories import RefreshTokenStore, UserRepository
from order_api.services.token_issuer import TokenIssuer, TokenPair, token_issuer

logger = logging.getLogger(__name__)


class TokenService:
    """
    Manage the refresh-token lifecycle of each identity.

    Session states: no record, active (one live token), expired or revoked.
    A successful refresh swaps the live token for a new one, so every
    refresh token is single-use. Refreshes of one identity are serialized by
    an in-process keyed lock and, across processes, by the compare-and-swap
    in ``RefreshTokenStore.replace``.
    """

    def __init__(
        self,
        issuer: TokenIssuer = token_issuer,
        locks: KeyedLock = session_locks,
        clock: Optional[Clock] = None,
    ) -> None:
        self.issuer = issuer
        self.locks = locks
        self.clock = clock or issuer.clock

    def start_session(self, db: Session, user: User) -> TokenPair:
        """Issue a pair and make its refresh token the identity's only live one."""
        pair = self.issuer.issue(user)
        with self.locks.hold(user.email, timeout=settings.TOKEN_LOCK_TIMEOUT_SECONDS):
            RefreshTokenStore(db).save(user.id, pair.refresh_token, pair.refresh_expiration)
        return pair

    def refresh(self, db: Session, email: str, presented_token: str) -> TokenPair:
        """
        Rotate ``presented_token`` into a new token pair.

        Raises:
            UnauthorizedError: no session, token mismatch, or token already rotated
            TokenExpiredError: token matches but is past its expiration
            ConcurrentModificationError: lock wait exceeded
        """
        email = normalize_email(email)
        with self.locks.hold(email, timeout=settings.TOKEN_LOCK_TIMEOUT_SECONDS):
            try:
                return self._rotate(db, email, presented_token)
            except Exception:
                db.rollback()
                raise

    def _rotate(self, db: Session, email: str, presented_token: str) -> TokenPair:
        user = UserRepository(db).find_by_email(email)
        if user is None or not user.is_active:
            raise UnauthorizedError()

        store = RefreshTokenStore(db)
        record = store.find_by_user(user.id, for_update=True)
        if record is None or record.revoked:
            raise UnauthorizedError()

        if not tokens_match(hash_refresh_token(presented_token), record.token_hash):
            logger.warning("Refresh token mismatch for user_id=%s", user.id)
            raise UnauthorizedError()

        now = self.clock.now()
        if as_utc(record.expires_at) <= now:
            raise TokenExpiredError()

        pair = self.issuer.issue(user)
        swapped = store.replace(
            user.id,
            expected_hash=record.token_hash,
            new_refresh_token=pair.refresh_token,
            expires_at=pair.refresh_expiration,
            rotated_at=now,
        )
        if not swapped:
            logger.warning("Lost refresh rotation race for user_id=%s", user.id)
            raise UnauthorizedError()

        logger.info("Rotated refresh token for user_id=%s", user.id)
        return pair

    def revoke(self, db: Session, user: User, refresh_token: Optional[str] = None) -> bool:
        """
        End the identity's session.

        When ``refresh_token`` is given it must be the identity's live token,
        otherwise nothing is revoked.
        """
        store = RefreshTokenStore(db)
        with self.locks.hold(user.email, timeout=settings.TOKEN_LOCK_TIMEOUT_SECONDS):
            if refresh_token is not None:
                try:
                    record = store.find(refresh_token)
                except RefreshTokenNotFoundError:
                    return False
                if record.user_id != user.id:
                    return False
            return store.invalidate(user.id, revoked_at=self.clock.now())

    def cleanup_expired(self, db: Session) -> int:
        return RefreshTokenStore(db).delete_expired(self.clock.now())


token_service = TokenService()
