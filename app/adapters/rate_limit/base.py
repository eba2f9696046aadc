"""Rate limiter interface.

Limiters count admitted calls inside a rolling time window. All operations
accept an explicit ``now`` (UNIX epoch seconds) so callers and tests can
supply their own clock; when omitted the limiter's own clock is used.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractRateLimiter(ABC):
    """Interface for short-term rate limiters."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Maximum number of calls admitted per window."""

    @property
    @abstractmethod
    def window_seconds(self) -> int:
        """Length of the rolling window in seconds."""

    @abstractmethod
    def try_admit(self, now: int | None = None) -> bool:
        """Record one call if the window has room.

        Args:
            now: Current epoch second (defaults to the limiter clock).

        Returns:
            True if the call was admitted and recorded, False otherwise.
            Denied attempts are never recorded.
        """
        raise NotImplementedError

    @abstractmethod
    def try_admit_or_wait(self, now: int | None = None) -> tuple[bool, int]:
        """Like ``try_admit``, plus the wait for a denied call.

        Returns:
            Tuple of (admitted, seconds_until_next_slot), both taken from
            the same view of the window. The wait is 0 when admitted.
        """
        raise NotImplementedError

    @abstractmethod
    def current_count(self, now: int | None = None) -> int:
        """Number of calls recorded inside the window ending at ``now``."""
        raise NotImplementedError

    @abstractmethod
    def seconds_until_next_slot(self, now: int | None = None) -> int:
        """Seconds to wait before a call can be admitted (0 if one can be now)."""
        raise NotImplementedError

    def remaining(self, now: int | None = None) -> int:
        """Calls that can still be admitted inside the current window."""
        return max(0, self.limit - self.current_count(now))
