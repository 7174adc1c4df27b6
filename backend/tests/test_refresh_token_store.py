from datetime import timedelta

import pytest

from order_api.core.exceptions import RefreshTokenNotFoundError
from order_api.core.security import hash_refresh_token
from order_api.models.security import RefreshToken
from order_api.repositories import RefreshTokenStore


def test_save_then_find(db, user, clock):
    store = RefreshTokenStore(db)
    store.save(user.id, "token-one", clock.now() + timedelta(days=7))

    record = store.find("token-one")
    assert record.user_id == user.id
    assert record.token_hash == hash_refresh_token("token-one")
    assert record.token_hash != "token-one"


def test_save_overwrites_previous_record(db, user, clock):
    store = RefreshTokenStore(db)
    store.save(user.id, "token-one", clock.now() + timedelta(days=7))
    store.save(user.id, "token-two", clock.now() + timedelta(days=7))

    assert db.query(RefreshToken).filter(RefreshToken.user_id == user.id).count() == 1
    with pytest.raises(RefreshTokenNotFoundError):
        store.find("token-one")
    assert store.find("token-two").user_id == user.id


def test_find_unknown_token_raises_not_found(db):
    with pytest.raises(RefreshTokenNotFoundError) as exc_info:
        RefreshTokenStore(db).find("never-issued")
    assert exc_info.value.status_code == 404


def test_invalidate_hides_record_from_find(db, user, clock):
    store = RefreshTokenStore(db)
    store.save(user.id, "token-one", clock.now() + timedelta(days=7))

    assert store.invalidate(user.id, revoked_at=clock.now()) is True
    with pytest.raises(RefreshTokenNotFoundError):
        store.find("token-one")
    assert store.invalidate(user.id) is False


def test_replace_is_compare_and_swap(db, user, clock):
    store = RefreshTokenStore(db)
    expires = clock.now() + timedelta(days=7)
    store.save(user.id, "token-one", expires)

    assert store.replace(user.id, hash_refresh_token("token-one"), "token-two", expires, clock.now())
    # Second swap from the same starting point loses
    assert not store.replace(user.id, hash_refresh_token("token-one"), "token-three", expires, clock.now())

    record = store.find("token-two")
    assert record.rotation_count == 1


def test_delete_expired_keeps_live_records(db, user, clock):
    store = RefreshTokenStore(db)
    store.save(user.id, "token-one", clock.now() + timedelta(seconds=10))

    assert store.delete_expired(clock.now()) == 0
    clock.advance(seconds=11)
    assert store.delete_expired(clock.now()) == 1
    assert store.find_by_user(user.id) is None
