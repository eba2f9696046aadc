"""Cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractCacheStore(ABC):
    """String key/value store where every entry expires on its own."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if missing or expired."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds`` (overwrites)."""
        raise NotImplementedError
