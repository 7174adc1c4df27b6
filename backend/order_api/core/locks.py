"""In-process keyed locks for serializing work per identity."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator

from order_api.core.exceptions import ConcurrentModificationError


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    waiters: int = 0


class KeyedLock:
    """One mutex per key, dropped once nobody holds or waits for it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    @contextmanager
    def hold(self, key: str, timeout: float) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, _Entry())
            entry.waiters += 1

        acquired = entry.lock.acquire(timeout=timeout)
        try:
            if not acquired:
                raise ConcurrentModificationError(
                    "Another request for this session is still in progress"
                )
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.waiters -= 1
                if entry.waiters == 0:
                    self._entries.pop(key, None)


session_locks = KeyedLock()
