"""User service - handles identity creation and credential verification"""

from sqlalchemy.orm import Session
from typing import Optional
from order_api.models.role import RoleName
from order_api.models.user import User
from order_api.repositories import RoleRepository, UserRepository
from order_api.schemas.user import UserCreate, UserResponse
from order_api.core.security import PasswordHasher, password_hasher
from order_api.core.validation import normalize_email, raise_for_errors, validate_new_user
from order_api.core.exceptions import (
    InvalidCredentialsError,
    DuplicateEmailError,
    ResourceNotFoundError,
)
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Service for identity management"""

    def __init__(self, hasher: PasswordHasher = password_hasher) -> None:
        self.hasher = hasher
        # Checked against when the email is unknown so both failure paths
        # spend the same hashing time.
        self._dummy_hash = hasher.hash("dummy-password-for-timing")

    def create_user(
        self,
        db: Session,
        user_data: UserCreate,
        role: RoleName = RoleName.ROLE_USER,
    ) -> UserResponse:
        """
        Create new identity

        Args:
            db: Database session
            user_data: User creation data
            role: Role granted to the new identity

        Returns:
            Created user

        Raises:
            ValidationError: If a field breaks the registration rules
            DuplicateEmailError: If the email is already registered
        """
        raise_for_errors(
            validate_new_user(user_data.name, user_data.email, user_data.password, user_data.phone)
        )
        email = normalize_email(user_data.email)

        users = UserRepository(db)
        if users.exists_by_email(email):
            raise DuplicateEmailError(email)

        roles = RoleRepository(db)
        granted = roles.find_by_name(role)
        if granted is None:
            roles.ensure_all()
            granted = roles.find_by_name(role)

        user = User(
            name=user_data.name.strip(),
            email=email,
            phone=user_data.phone,
            password_hash=self.hasher.hash(user_data.password),
        )
        user = users.add(user, [granted])

        logger.info(f"Created user: {user.email} (roles: {user.role_names})")
        return UserResponse.from_user(user)

    def authenticate_user(self, db: Session, email: str, password: str) -> User:
        """
        Verify credentials without side effects

        Unknown email, inactive account and wrong password all raise the same
        error so callers cannot enumerate accounts.

        Args:
            db: Database session
            email: Email address
            password: Plain text password

        Returns:
            Authenticated user
        """
        user = UserRepository(db).find_by_email(normalize_email(email))

        if user is None:
            self.hasher.verify(password, self._dummy_hash)
            raise InvalidCredentialsError()

        password_ok = self.hasher.verify(password, user.password_hash)
        if not password_ok or not user.is_active:
            raise InvalidCredentialsError()

        logger.info(f"User authenticated: {user.email}")
        return user

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return UserRepository(db).find_by_id(user_id)

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return UserRepository(db).find_by_email(normalize_email(email))

    @staticmethod
    def get_user(db: Session, user_id: int) -> UserResponse:
        user = UserRepository(db).find_by_id(user_id)
        if not user:
            raise ResourceNotFoundError("User")
        return UserResponse.from_user(user)


# Singleton instance
user_service = UserService()
