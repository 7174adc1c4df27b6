"""Database models"""

from order_api.models.role import Role, RoleName, user_roles
from order_api.models.user import User
from order_api.models.security import RefreshToken
from order_api.models.audit import AuditEvent

__all__ = ["Role", "RoleName", "user_roles", "User", "RefreshToken", "AuditEvent"]
