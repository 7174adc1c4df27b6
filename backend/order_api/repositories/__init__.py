"""Explicit repositories over the SQLAlchemy session"""

from order_api.repositories.user_repository import RoleRepository, UserRepository
from order_api.repositories.refresh_token_repository import RefreshTokenStore

__all__ = ["RoleRepository", "UserRepository", "RefreshTokenStore"]
