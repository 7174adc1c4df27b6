from datetime import datetime, timedelta, timezone

from jose import jwt

from order_api.config import settings
from order_api.core.security import (
    BcryptPasswordHasher,
    create_access_token,
    decode_access_token,
    decode_token,
    generate_refresh_token,
    hash_refresh_token,
    tokens_match,
)


def _issue(email="alice@example.com", minutes=60):
    now = datetime.now(timezone.utc)
    return create_access_token(
        email,
        ["ROLE_USER"],
        issued_at=now,
        expires_at=now + timedelta(minutes=minutes),
    )


def test_access_token_round_trip():
    payload = decode_access_token(_issue())
    assert payload is not None
    assert payload["sub"] == "alice@example.com"
    assert payload["roles"] == ["ROLE_USER"]
    assert payload["typ"] == "access"
    assert payload["exp"] > payload["iat"]


def test_expired_access_token_is_rejected():
    assert decode_access_token(_issue(minutes=-5)) is None


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode(
        {"sub": "alice@example.com", "typ": "access"},
        "some-other-secret",
        algorithm=settings.ALGORITHM,
    )
    assert decode_token(forged) is None


def test_access_decoder_requires_access_type():
    other = jwt.encode(
        {"sub": "alice@example.com", "typ": "refresh"},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    assert decode_token(other) is not None
    assert decode_access_token(other) is None


def test_refresh_tokens_are_random_and_hashed():
    first = generate_refresh_token()
    second = generate_refresh_token()
    assert first != second
    assert len(first) >= 64
    digest = hash_refresh_token(first)
    assert len(digest) == 64
    assert first not in digest
    assert tokens_match(digest, hash_refresh_token(first))
    assert not tokens_match(digest, hash_refresh_token(second))


def test_bcrypt_hasher_verifies_and_tolerates_garbage_hash():
    hasher = BcryptPasswordHasher()
    hashed = hasher.hash("mypass123")
    assert hashed != "mypass123"
    assert hasher.verify("mypass123", hashed)
    assert not hasher.verify("wrong", hashed)
    assert not hasher.verify("mypass123", "not-a-bcrypt-hash")
