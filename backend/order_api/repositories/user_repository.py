"""Identity and role lookups."""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from order_api.core.exceptions import DuplicateEmailError
from order_api.models.role import Role, RoleName
from order_api.models.user import User

logger = logging.getLogger(__name__)


class RoleRepository:
    """Typed access to the roles table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_name(self, name: RoleName) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name.value)
        return self._session.execute(stmt).scalar_one_or_none()

    def ensure_all(self) -> List[Role]:
        """Create any missing role rows. Idempotent."""
        roles = []
        for name in RoleName:
            role = self.find_by_name(name)
            if role is None:
                role = Role(name=name.value)
                self._session.add(role)
                logger.info("Seeded role %s", name.value)
            roles.append(role)
        self._session.commit()
        return roles


class UserRepository:
    """Typed access to identities. Emails are expected to be normalized."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self._session.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return self._session.execute(stmt).scalar_one_or_none()

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email)
        return self._session.execute(stmt).first() is not None

    def add(self, user: User, roles: Iterable[Role]) -> User:
        user.roles = list(roles)
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise DuplicateEmailError(user.email) from e
        self._session.refresh(user)
        return user
