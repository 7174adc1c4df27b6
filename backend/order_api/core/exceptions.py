"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors
class AuthenticationError(BaseAPIException):
    """Base authentication error"""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password, deliberately indistinguishable"""
    def __init__(self):
        super().__init__("Invalid email address or password")


class UnauthorizedError(AuthenticationError):
    """Refresh token is absent, mismatched, revoked or already rotated"""
    def __init__(self, message: str = "Invalid refresh token"):
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    """Refresh token is past its expiration"""
    def __init__(self):
        super().__init__("Refresh token has expired, please log in again")


# Authorization Errors
class AuthorizationError(BaseAPIException):
    """Insufficient permissions"""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


class RefreshTokenNotFoundError(ResourceNotFoundError):
    """No live refresh record matches the presented token"""
    def __init__(self):
        super().__init__("Refresh token")


class DuplicateEmailError(BaseAPIException):
    """Email already registered"""
    def __init__(self, email: str):
        super().__init__(
            "Email already exists",
            status_code=409,
            details={"email": email},
        )


# Validation Errors
class ValidationError(BaseAPIException):
    """Validation error"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


# System Errors
class ConcurrentModificationError(BaseAPIException):
    """Concurrent modification detected"""
    def __init__(self, message: str = "Resource was modified by another request"):
        super().__init__(message, status_code=409)


class RateLimitExceededError(BaseAPIException):
    """Rate limit exceeded"""
    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message, status_code=429)
