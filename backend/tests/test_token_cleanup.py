from conftest import create_test_user, make_session_factory
from order_api.models.security import RefreshToken
from order_api.services.token_cleanup import TokenCleanupWorker


def test_run_once_removes_expired_and_revoked(tokens, clock):
    factory = make_session_factory()
    setup = factory()
    try:
        alice = create_test_user(setup, email="alice@email.com", name="Alice")
        bob = create_test_user(setup, email="bob@email.com", name="Bob")
        carol = create_test_user(setup, email="carol@email.com", name="Carol")
        tokens.start_session(setup, alice)
        tokens.start_session(setup, bob)
        tokens.revoke(setup, bob)
        clock.advance(days=8)
        tokens.start_session(setup, carol)
    finally:
        setup.close()

    worker = TokenCleanupWorker(session_factory=factory, tokens=tokens, interval_seconds=60)
    assert worker.run_once() == 2
    assert worker.run_once() == 0
    assert worker.status()["removed_count"] == 2

    check = factory()
    try:
        assert check.query(RefreshToken).count() == 1
    finally:
        check.close()


def test_worker_start_and_stop(tokens):
    worker = TokenCleanupWorker(session_factory=make_session_factory(), tokens=tokens, interval_seconds=60)
    worker.start()
    try:
        assert worker.is_running()
    finally:
        worker.stop()
    assert not worker.is_running()
