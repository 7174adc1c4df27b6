"""Pydantic schemas for API payloads"""

from order_api.schemas.user import UserCreate, UserResponse
from order_api.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, LogoutRequest, LogoutResponse
from order_api.schemas.response import ErrorResponse, HealthResponse

__all__ = [
    "UserCreate", "UserResponse",
    "LoginRequest", "RefreshRequest", "TokenResponse", "LogoutRequest", "LogoutResponse",
    "ErrorResponse", "HealthResponse",
]
