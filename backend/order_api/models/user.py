"""User model"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from order_api.core.database import Base
from order_api.models.role import user_roles


class User(Base):
    """Identity used for authentication and authorization"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(65), nullable=False)
    email = Column(String(254), unique=True, nullable=False)
    phone = Column(String(20), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Loaded eagerly: role claims are needed on every token issue
    roles = relationship("Role", secondary=user_roles, lazy="selectin")

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )

    @property
    def role_names(self):
        return sorted(role.name for role in self.roles)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
