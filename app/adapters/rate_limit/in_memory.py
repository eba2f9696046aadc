"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: state is lost on restart, which is acceptable for a
  window of about a minute.
- Thread-safe: clock read, prune, size check and append run under one lock.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Admit at most ``limit`` calls in any trailing ``window_seconds`` interval.

    Admitted calls are stored as epoch seconds in a deque, oldest first.
    Entries older than ``now - window_seconds`` are pruned lazily on every
    read and write.
    """

    def __init__(
        self,
        *,
        limit: int = 20,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of calls admitted per window.
            window_seconds: Size of the sliding window in seconds.
            clock: Time source returning UNIX time in seconds, used when a
                caller does not pass ``now``.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._timestamps: deque[int] = deque()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemorySlidingWindowRateLimiter(limit={self._limit}, "
            f"window_seconds={self._window_seconds}, size={len(self._timestamps)})"
        )

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _resolve_now(self, now: int | None) -> int:
        return int(self._clock()) if now is None else int(now)

    def _prune_locked(self, now: int) -> None:
        window_start = now - self._window_seconds
        while self._timestamps and self._timestamps[0] < window_start:
            self._timestamps.popleft()

    def _wait_locked(self, now: int) -> int:
        if len(self._timestamps) < self._limit:
            return 0
        return max(0, self._timestamps[0] + self._window_seconds - now)

    def try_admit(self, now: int | None = None) -> bool:
        admitted, _ = self.try_admit_or_wait(now)
        return admitted

    def try_admit_or_wait(self, now: int | None = None) -> tuple[bool, int]:
        with self._lock:
            now = self._resolve_now(now)
            self._prune_locked(now)
            if len(self._timestamps) < self._limit:
                self._timestamps.append(now)
                return True, 0
            return False, self._wait_locked(now)

    def current_count(self, now: int | None = None) -> int:
        with self._lock:
            now = self._resolve_now(now)
            self._prune_locked(now)
            return len(self._timestamps)

    def seconds_until_next_slot(self, now: int | None = None) -> int:
        with self._lock:
            now = self._resolve_now(now)
            self._prune_locked(now)
            return self._wait_locked(now)

    def reset(self) -> None:
        """Forget all recorded calls."""
        with self._lock:
            self._timestamps.clear()
