"""Background worker that prunes expired and revoked refresh tokens."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from order_api.config import settings
from order_api.core.metrics import EXPIRED_TOKENS_REMOVED
from order_api.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)


class TokenCleanupWorker:
    """
    Periodic housekeeping for the refresh token table.

    Expiration is always checked on use, so this worker only keeps the table
    small; stopping it never affects correctness.
    """

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        tokens: TokenService = token_service,
        interval_seconds: Optional[float] = None,
    ) -> None:
        self._session_factory = session_factory
        self._tokens = tokens
        self._interval = interval_seconds or settings.TOKEN_CLEANUP_INTERVAL_SECONDS
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._heartbeat: float = 0.0
        self._removed_count: int = 0
        self._lock = threading.Lock()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="token-cleanup", daemon=True)
        self._thread.start()
        logger.info("Token cleanup worker started (interval=%.0fs)", self._interval)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        logger.info("Token cleanup worker stopped")

    def status(self) -> dict:
        return {
            "running": self.is_running(),
            "last_heartbeat": self._heartbeat,
            "removed_count": self._removed_count,
        }

    def _open_session(self) -> Session:
        if self._session_factory is None:
            from order_api.core.database import SessionLocal

            self._session_factory = SessionLocal
        return self._session_factory()

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except SQLAlchemyError as exc:
                logger.error("Token cleanup pass failed: %s", exc)
            self._heartbeat = time.time()
            self._stop_event.wait(max(1.0, self._interval))

    def run_once(self) -> int:
        db = self._open_session()
        try:
            removed = self._tokens.cleanup_expired(db)
        finally:
            db.close()
        if removed:
            EXPIRED_TOKENS_REMOVED.inc(removed)
        with self._lock:
            self._removed_count += removed
        return removed


token_cleanup_worker = TokenCleanupWorker()
