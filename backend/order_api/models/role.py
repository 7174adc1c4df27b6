"""Role model and the user/role association table"""

from enum import Enum

from sqlalchemy import Column, Integer, String, ForeignKey, Table

from order_api.core.database import Base


class RoleName(str, Enum):
    """Known roles, seeded at startup"""
    ROLE_USER = "ROLE_USER"
    ROLE_MANAGER = "ROLE_MANAGER"
    ROLE_ADMIN = "ROLE_ADMIN"


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """Authority granted to identities"""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(32), unique=True, nullable=False)

    def __repr__(self):
        return f"<Role(id={self.id}, name='{self.name}')>"
