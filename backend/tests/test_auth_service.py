import json

import pytest

from conftest import TEST_EMAIL, TEST_PASSWORD
from order_api.core.exceptions import (
    InvalidCredentialsError,
    TokenExpiredError,
    UnauthorizedError,
    ValidationError,
)
from order_api.models.audit import AuditEvent
from order_api.models.security import RefreshToken
from order_api.services.audit_service import AuditService
from order_api.services.auth_service import AuthService
from order_api.services.user_service import user_service


@pytest.fixture
def auth(tokens):
    return AuthService(users=user_service, tokens=tokens, audit=AuditService())


def test_login_returns_complete_pair(db, auth, user):
    pair = auth.login(db, TEST_EMAIL, TEST_PASSWORD, client_ip="10.0.0.1")

    assert pair.email == TEST_EMAIL
    assert pair.expiration > pair.creation
    assert pair.access_token and pair.refresh_token
    assert pair.access_token != pair.refresh_token
    assert db.query(RefreshToken).filter(RefreshToken.user_id == user.id).count() == 1


def test_login_normalizes_email(db, auth, user):
    pair = auth.login(db, "  Testing@Email.COM ", TEST_PASSWORD)
    assert pair.email == TEST_EMAIL


@pytest.mark.parametrize(
    "email,password",
    [
        (TEST_EMAIL, "wrongpass1"),
        ("nobody@email.com", TEST_PASSWORD),
    ],
)
def test_failed_login_is_indistinguishable_and_stores_nothing(db, auth, user, email, password):
    with pytest.raises(InvalidCredentialsError) as exc_info:
        auth.login(db, email, password)

    assert exc_info.value.message == "Invalid email address or password"
    assert db.query(RefreshToken).count() == 0


def test_login_with_missing_fields_is_rejected_before_lookup(db, auth, user):
    with pytest.raises(ValidationError) as exc_info:
        auth.login(db, "   ", "")

    fields = {error["field"] for error in exc_info.value.details["errors"]}
    assert fields == {"email", "password"}


@pytest.mark.parametrize(
    "email,password",
    [
        ("testing", TEST_PASSWORD),
        (TEST_EMAIL, "x" * 200),
    ],
)
def test_login_with_odd_values_fails_as_bad_credentials(db, auth, user, email, password):
    with pytest.raises(InvalidCredentialsError):
        auth.login(db, email, password)
    assert db.query(RefreshToken).count() == 0


def test_refresh_with_malformed_email_is_unauthorized(db, auth, user):
    pair = auth.login(db, TEST_EMAIL, TEST_PASSWORD)

    with pytest.raises(UnauthorizedError):
        auth.refresh_session(db, "testing", pair.refresh_token)


def test_login_rotate_then_replay(db, auth, user):
    first = auth.login(db, TEST_EMAIL, TEST_PASSWORD)
    second = auth.refresh_session(db, TEST_EMAIL, first.refresh_token)

    assert second.refresh_token != first.refresh_token
    with pytest.raises(UnauthorizedError):
        auth.refresh_session(db, TEST_EMAIL, first.refresh_token)


def test_refresh_with_empty_token_is_validation_error(db, auth, user):
    with pytest.raises(ValidationError):
        auth.refresh_session(db, TEST_EMAIL, "")


def test_refresh_after_expiry(db, auth, user, clock):
    pair = auth.login(db, TEST_EMAIL, TEST_PASSWORD)
    clock.advance(days=8)

    with pytest.raises(TokenExpiredError):
        auth.refresh_session(db, TEST_EMAIL, pair.refresh_token)


def test_logout_revokes_session(db, auth, user):
    pair = auth.login(db, TEST_EMAIL, TEST_PASSWORD)

    assert auth.logout(db, user, pair.refresh_token) is True
    assert auth.logout(db, user) is False
    with pytest.raises(UnauthorizedError):
        auth.refresh_session(db, TEST_EMAIL, pair.refresh_token)


def test_auth_events_are_audited(db, auth, user):
    with pytest.raises(InvalidCredentialsError):
        auth.login(db, TEST_EMAIL, "wrongpass1", client_ip="10.0.0.2")
    auth.login(db, TEST_EMAIL, TEST_PASSWORD, client_ip="10.0.0.2")

    events = db.query(AuditEvent).order_by(AuditEvent.id).all()
    assert [(e.action, e.outcome) for e in events] == [("login", "failure"), ("login", "success")]
    assert events[0].user_id is None
    assert json.loads(events[0].metadata_json) == {"email": TEST_EMAIL}
    assert events[1].user_id == user.id
    assert events[1].ip_address == "10.0.0.2"


def test_rejected_refresh_is_audited(db, auth, user):
    with pytest.raises(UnauthorizedError):
        auth.refresh_session(db, TEST_EMAIL, "never-issued")

    event = db.query(AuditEvent).filter(AuditEvent.action == "refresh").one()
    assert event.outcome == "unauthorized"
