"""Counter store interface.

Services depend on this abstraction (not on Redis directly) so tests and
single-process deployments can run against the in-memory implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CounterStoreError(RuntimeError):
    """Raised when the backing store cannot be read or written."""


class AbstractCounterStore(ABC):
    """Interface for shared integer counters with expiry."""

    @abstractmethod
    def increment(self, key: str, *, ttl_seconds: int, amount: int = 1) -> int:
        """Atomically add ``amount`` to ``key`` and (re)set its expiry.

        Missing keys start at zero. The add must be a single atomic
        operation in the store, never a read followed by a write.

        Args:
            key: Counter key.
            ttl_seconds: Expiry applied to the key after the increment.
            amount: Value to add (default 1).

        Returns:
            The counter value after the increment.

        Raises:
            CounterStoreError: If the store is unavailable.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the raw stored value, or None if the key does not exist.

        Raises:
            CounterStoreError: If the store is unavailable.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        raise NotImplementedError
