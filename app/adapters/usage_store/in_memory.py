"""In-memory counter store.

Notes:
- Per-process only: counters are lost on restart and not shared between
  workers. Intended for tests and local development.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.usage_store.base import AbstractCounterStore


@dataclass
class _Counter:
    value: int
    expires_at: float


class InMemoryCounterStore(AbstractCounterStore):
    """Dictionary-backed counters with per-key expiry."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._counters: dict[str, _Counter] = {}

    def _live_counter_locked(self, key: str) -> _Counter | None:
        counter = self._counters.get(key)
        if counter is None:
            return None
        if counter.expires_at <= self._clock():
            del self._counters[key]
            return None
        return counter

    def increment(self, key: str, *, ttl_seconds: int, amount: int = 1) -> int:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        with self._lock:
            counter = self._live_counter_locked(key)
            value = (counter.value if counter else 0) + amount
            self._counters[key] = _Counter(value=value, expires_at=self._clock() + ttl_seconds)
            return value

    def get(self, key: str) -> str | None:
        with self._lock:
            counter = self._live_counter_locked(key)
            return None if counter is None else str(counter.value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._counters.pop(key, None)

    def ttl(self, key: str) -> int | None:
        """Remaining lifetime of ``key`` in whole seconds, or None if absent."""
        with self._lock:
            counter = self._live_counter_locked(key)
            if counter is None:
                return None
            return int(counter.expires_at - self._clock())
