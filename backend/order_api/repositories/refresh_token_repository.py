"""
Refresh token store.

Holds at most one record per identity. Token values never reach the
database: only their SHA-256 digest is stored and compared.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from order_api.core.exceptions import RefreshTokenNotFoundError
from order_api.core.security import hash_refresh_token
from order_api.models.security import RefreshToken

logger = logging.getLogger(__name__)


class RefreshTokenStore:
    """Persistence of refresh-token state keyed by identity."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, user_id: int, refresh_token: str, expires_at: datetime) -> RefreshToken:
        """Store ``refresh_token`` as the only live token of ``user_id``."""
        record = self.find_by_user(user_id)
        if record is None:
            record = RefreshToken(user_id=user_id, rotation_count=0)
            self._session.add(record)
        else:
            record.rotation_count = 0
        record.token_hash = hash_refresh_token(refresh_token)
        record.expires_at = expires_at
        record.revoked = False
        record.revoked_at = None
        record.rotated_at = None
        self._session.commit()
        self._session.refresh(record)
        return record

    def find(self, refresh_token: str) -> RefreshToken:
        """
        Live record matching ``refresh_token``.

        Raises:
            RefreshTokenNotFoundError: never issued, rotated away or revoked
        """
        stmt = select(RefreshToken).where(
            RefreshToken.token_hash == hash_refresh_token(refresh_token),
            RefreshToken.revoked.is_(False),
        )
        record = self._session.execute(stmt).scalar_one_or_none()
        if record is None:
            raise RefreshTokenNotFoundError()
        return record

    def find_by_user(self, user_id: int, for_update: bool = False) -> Optional[RefreshToken]:
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id)
        if for_update:
            # Row lock where the backend supports it; ignored by SQLite
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalar_one_or_none()

    def replace(
        self,
        user_id: int,
        expected_hash: str,
        new_refresh_token: str,
        expires_at: datetime,
        rotated_at: datetime,
    ) -> bool:
        """
        Compare-and-swap rotation.

        Returns False when the stored digest is no longer ``expected_hash``,
        i.e. another request rotated or revoked the token first.
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.token_hash == expected_hash,
                RefreshToken.revoked.is_(False),
            )
            .values(
                token_hash=hash_refresh_token(new_refresh_token),
                expires_at=expires_at,
                rotated_at=rotated_at,
                rotation_count=RefreshToken.rotation_count + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        if result.rowcount != 1:
            self._session.rollback()
            return False
        self._session.commit()
        return True

    def invalidate(self, user_id: int, revoked_at: Optional[datetime] = None) -> bool:
        """Revoke the identity's record. Returns False if it had none."""
        record = self.find_by_user(user_id)
        if record is None or record.revoked:
            return False
        record.revoked = True
        record.revoked_at = revoked_at
        self._session.commit()
        return True

    def delete_expired(self, now: datetime) -> int:
        """Drop expired and revoked records; lookups never depend on this."""
        stmt = delete(RefreshToken).where(
            or_(RefreshToken.expires_at <= now, RefreshToken.revoked.is_(True))
        ).execution_options(synchronize_session=False)
        result = self._session.execute(stmt)
        self._session.commit()
        deleted = result.rowcount or 0
        if deleted:
            logger.info("Removed %d stale refresh token records", deleted)
        return deleted
