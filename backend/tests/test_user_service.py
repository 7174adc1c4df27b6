import pytest

from conftest import TEST_EMAIL, TEST_PASSWORD, create_test_user
from order_api.core.exceptions import DuplicateEmailError, InvalidCredentialsError, ValidationError
from order_api.models.role import RoleName
from order_api.models.security import RefreshToken
from order_api.schemas.user import UserCreate
from order_api.services.user_service import UserService, user_service


class CountingHasher:
    """Plain-text hasher that records verify calls."""

    def __init__(self):
        self.verify_calls = 0

    def hash(self, password):
        return f"plain:{password}"

    def verify(self, plain_password, hashed_password):
        self.verify_calls += 1
        return hashed_password == f"plain:{plain_password}"


def test_create_user_normalizes_email_and_grants_user_role(db):
    created = user_service.create_user(
        db,
        UserCreate(name="Testing", email="  Testing@Email.com", password=TEST_PASSWORD, phone=""),
    )
    assert created.email == TEST_EMAIL
    assert created.roles == [RoleName.ROLE_USER.value]
    stored = user_service.get_user_by_email(db, TEST_EMAIL)
    assert stored.password_hash != TEST_PASSWORD


def test_duplicate_email_is_rejected(db, user):
    with pytest.raises(DuplicateEmailError) as exc_info:
        create_test_user(db, email=TEST_EMAIL.upper())
    assert exc_info.value.status_code == 409


def test_invalid_registration_is_rejected_before_persisting(db):
    with pytest.raises(ValidationError):
        user_service.create_user(
            db,
            UserCreate(name="Testing", email="bad", password="short", phone=""),
        )
    assert user_service.get_user_by_email(db, "bad") is None


def test_authenticate_user_returns_identity(db, user):
    authenticated = user_service.authenticate_user(db, "TESTING@email.com", TEST_PASSWORD)
    assert authenticated.id == user.id


@pytest.mark.parametrize(
    "email,password",
    [(TEST_EMAIL, "wrongpass1"), ("nobody@email.com", TEST_PASSWORD)],
)
def test_authenticate_user_failures_are_indistinguishable(db, user, email, password):
    with pytest.raises(InvalidCredentialsError) as exc_info:
        user_service.authenticate_user(db, email, password)
    assert exc_info.value.message == "Invalid email address or password"
    assert exc_info.value.status_code == 401


def test_authenticate_user_is_read_only(db, user):
    with pytest.raises(InvalidCredentialsError):
        user_service.authenticate_user(db, TEST_EMAIL, "wrongpass1")
    assert not db.dirty
    assert not db.new
    assert db.query(RefreshToken).count() == 0


def test_unknown_email_still_runs_a_password_check(db):
    hasher = CountingHasher()
    service = UserService(hasher=hasher)
    with pytest.raises(InvalidCredentialsError):
        service.authenticate_user(db, "nobody@email.com", TEST_PASSWORD)
    assert hasher.verify_calls == 1


def test_inactive_user_cannot_authenticate(db, user):
    user.is_active = False
    db.commit()
    with pytest.raises(InvalidCredentialsError):
        user_service.authenticate_user(db, TEST_EMAIL, TEST_PASSWORD)
