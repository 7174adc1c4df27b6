"""User registration routes"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from order_api.core.database import get_db
from order_api.schemas.response import ErrorResponse
from order_api.schemas.user import UserCreate, UserResponse
from order_api.services.user_service import user_service
from order_api.api.deps import require_roles
from order_api.models.role import RoleName
from order_api.models.user import User

router = APIRouter()


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already exists"},
        422: {"model": ErrorResponse, "description": "Invalid arguments"},
    },
)
def register_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new identity with the default user role"""
    return user_service.create_user(db, user_data)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    current_user: User = Depends(require_roles(RoleName.ROLE_USER, RoleName.ROLE_ADMIN)),
    db: Session = Depends(get_db)
):
    """Get a user by id (users and admins)"""
    return user_service.get_user(db, user_id)
