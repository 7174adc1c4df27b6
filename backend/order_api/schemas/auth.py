"""Authentication request/response schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Login body: ``{email, password}``"""
    email: str
    password: str


class RefreshRequest(BaseModel):
    """Refresh body: ``{email, refreshToken}``"""
    email: str
    refresh_token: str = Field(..., alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)


class TokenResponse(BaseModel):
    """Token pair as returned by login and refresh"""
    email: str
    authenticated: bool = True
    creation: datetime
    expiration: datetime
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_pair(cls, pair) -> "TokenResponse":
        return cls(
            email=pair.email,
            authenticated=True,
            creation=pair.creation,
            expiration=pair.expiration,
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        )


class LogoutRequest(BaseModel):
    """Optional logout body: ``{refreshToken}``"""
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)


class LogoutResponse(BaseModel):
    success: bool = True
    message: str
    refresh_token_revoked: bool
