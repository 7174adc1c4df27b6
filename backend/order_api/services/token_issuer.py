"""Access/refresh token pair minting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from order_api.config import settings
from order_api.core.clock import Clock, system_clock
from order_api.core.security import create_access_token, generate_refresh_token
from order_api.models.user import User


@dataclass(frozen=True)
class TokenPair:
    """Freshly issued credentials for one identity."""

    email: str
    access_token: str
    refresh_token: str
    creation: datetime
    expiration: datetime
    refresh_expiration: datetime


class TokenIssuer:
    """Mint token pairs. Persisting the refresh token is the caller's job."""

    def __init__(
        self,
        clock: Clock = system_clock,
        access_lifetime: timedelta | None = None,
        refresh_lifetime: timedelta | None = None,
    ) -> None:
        self.clock = clock
        self.access_lifetime = access_lifetime or timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        self.refresh_lifetime = refresh_lifetime or timedelta(
            days=settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
        if self.access_lifetime >= self.refresh_lifetime:
            raise ValueError("Access token lifetime must be shorter than refresh token lifetime")

    def issue(self, user: User) -> TokenPair:
        creation = self.clock.now()
        expiration = creation + self.access_lifetime
        access_token = create_access_token(
            user.email,
            user.role_names,
            issued_at=creation,
            expires_at=expiration,
        )
        return TokenPair(
            email=user.email,
            access_token=access_token,
            refresh_token=generate_refresh_token(),
            creation=creation,
            expiration=expiration,
            refresh_expiration=creation + self.refresh_lifetime,
        )


token_issuer = TokenIssuer()
