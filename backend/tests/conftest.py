import os
import tempfile
from datetime import datetime, timedelta, timezone

# Settings are read once on first import of order_api.config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "order-api-tests.log"))
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_api.core.database import Base
from order_api.core.locks import KeyedLock
from order_api.schemas.user import UserCreate
from order_api.services.token_issuer import TokenIssuer
from order_api.services.token_service import TokenService
from order_api.services.user_service import user_service

TEST_EMAIL = "testing@email.com"
TEST_PASSWORD = "mypass123"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start=None):
        self.current = start or datetime.now(timezone.utc)

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)


def make_session_factory(url="sqlite://"):
    if url == "sqlite://":
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_test_user(db, email=TEST_EMAIL, password=TEST_PASSWORD, name="Testing"):
    user_service.create_user(
        db,
        UserCreate(name=name, email=email, password=password, phone="15457812345"),
    )
    return user_service.get_user_by_email(db, email)


@pytest.fixture
def db():
    session = make_session_factory()()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def tokens(clock):
    issuer = TokenIssuer(
        clock=clock,
        access_lifetime=timedelta(hours=1),
        refresh_lifetime=timedelta(days=7),
    )
    return TokenService(issuer=issuer, locks=KeyedLock())


@pytest.fixture
def user(db):
    return create_test_user(db)
