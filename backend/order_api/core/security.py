"""Security utilities - JWT, password hashing, refresh token material"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, Iterable, Protocol
from jose import JWTError, jwt
import bcrypt
import hashlib
import hmac
from order_api.config import settings
import secrets

ACCESS_TOKEN_TYPE = "access"


class PasswordHasher(Protocol):
    """Pluggable password hashing capability."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        ...


class BcryptPasswordHasher:
    """Default hasher backed by bcrypt."""

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode('utf-8'),
            bcrypt.gensalt()
        ).decode('utf-8')

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except ValueError:
            # Malformed stored hash
            return False


password_hasher = BcryptPasswordHasher()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        bool: True if password matches
    """
    return password_hasher.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password with the default hasher

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return password_hasher.hash(password)


def create_access_token(
    email: str,
    roles: Iterable[str],
    issued_at: datetime,
    expires_at: datetime,
) -> str:
    """
    Create a signed JWT access token

    Args:
        email: Identity the token is issued for (``sub`` claim)
        roles: Role names carried as the ``roles`` claim
        issued_at: Creation instant
        expires_at: Expiration instant

    Returns:
        str: Encoded JWT token
    """
    to_encode = {
        "sub": email,
        "roles": sorted(roles),
        "typ": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": expires_at,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify any JWT signed with the application secret

    Returns:
        Optional[Dict]: Decoded payload or None if invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a JWT and require it to be an access token

    Args:
        token: JWT token string

    Returns:
        Optional[Dict]: Decoded token data or None if invalid
    """
    payload = decode_token(token)
    if not payload or payload.get("typ") != ACCESS_TOKEN_TYPE:
        return None
    return payload


def generate_refresh_token() -> str:
    """Opaque, URL-safe refresh token value."""
    return secrets.token_urlsafe(48)


def hash_refresh_token(token: str) -> str:
    """Digest stored in place of the refresh token value."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def tokens_match(presented_hash: str, stored_hash: str) -> bool:
    """Constant-time comparison of two token digests."""
    return hmac.compare_digest(presented_hash.encode('utf-8'), stored_hash.encode('utf-8'))


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
