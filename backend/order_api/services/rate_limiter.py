"""In-memory sliding-window rate limiting for auth endpoints."""

from __future__ import annotations

import hashlib
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from order_api.config import settings
from order_api.core.exceptions import RateLimitExceededError

# Minimum seconds between sweeps of idle keys
SWEEP_INTERVAL_SECONDS = 60.0


class InMemoryRateLimiter:
    """Sliding-window limiter suitable for single-node deployments."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: Dict[str, Deque[float]] = {}
        self._windows: Dict[str, int] = {}
        self._last_sweep = clock()

    def _prune(self, key: str, window_seconds: int, now: float) -> Deque[float]:
        hits = self._hits.get(key, deque())
        cutoff = now - window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits

    def _sweep(self, now: float) -> None:
        """Drop keys whose newest hit has left their window."""
        if now - self._last_sweep < SWEEP_INTERVAL_SECONDS:
            return
        self._last_sweep = now
        for key in list(self._hits):
            if self._hits[key][-1] <= now - self._windows[key]:
                del self._hits[key]
                del self._windows[key]

    def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            hits = self._prune(key, window_seconds, now)
            if len(hits) >= limit:
                return False
            hits.append(now)
            self._hits[key] = hits
            self._windows[key] = window_seconds
            return True

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._windows.clear()

    def check_login(self, client_ip: str, email: str) -> None:
        # Emails come straight from the request body; key on a fixed-size digest
        user_key = hashlib.sha256(email.strip().lower().encode("utf-8")).hexdigest()
        if not self.allow(f"login:min:{client_ip}:{user_key}", settings.LOGIN_RATE_LIMIT_PER_MINUTE, 60):
            raise RateLimitExceededError("Too many login attempts. Please wait a minute.")
        if not self.allow(f"login:hour:{client_ip}:{user_key}", settings.LOGIN_RATE_LIMIT_PER_HOUR, 3600):
            raise RateLimitExceededError("Too many login attempts. Please try again later.")

    def check_refresh(self, client_ip: str) -> None:
        if not self.allow(f"refresh:min:{client_ip}", settings.REFRESH_RATE_LIMIT_PER_MINUTE, 60):
            raise RateLimitExceededError("Too many refresh attempts. Slow down.")
        if not self.allow(f"refresh:hour:{client_ip}", settings.REFRESH_RATE_LIMIT_PER_HOUR, 3600):
            raise RateLimitExceededError("Too many refresh attempts. Try later.")


rate_limiter = InMemoryRateLimiter()
