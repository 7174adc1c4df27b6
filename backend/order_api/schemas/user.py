"""User schemas"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class UserCreate(BaseModel):
    """
    User registration schema

    Only presence and types are checked here; the field rules live in
    ``order_api.core.validation.validate_new_user``.
    """
    name: str
    email: str
    password: str
    phone: str = ""


class UserResponse(BaseModel):
    """User response schema"""
    id: int
    name: str
    email: str
    phone: str
    roles: List[str] = Field(default_factory=list)
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            roles=user.role_names,
            is_active=user.is_active,
            created_at=user.created_at,
        )
