"""Result cache policy for upstream fetches.

Results are grouped into cache classes, each with its own default TTL.
Entries are JSON strings stored under ``"<class>:<fingerprint>"`` and only
disappear through the store's own expiry.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Mapping

from app.adapters.cache.base import AbstractCacheStore

logger = logging.getLogger(__name__)


class CacheClass(str, Enum):
    """Named categories of cacheable results."""

    QUOTES = "quotes"
    HISTORY = "history"


DEFAULT_TTLS: dict[CacheClass, int] = {
    CacheClass.QUOTES: 120,
    CacheClass.HISTORY: 300,
}


def build_cache_key(cache_class: CacheClass | str, fingerprint: str) -> str:
    """Build the store key, e.g. ``quotes:all`` or ``history:SPY``."""
    return f"{CacheClass(cache_class).value}:{fingerprint}"


class ResultCache:
    """Caches successful upstream results per cache class.

    Failed or empty (``None``) results are never written, so a transient
    upstream failure cannot replace or prolong an entry. Store errors degrade
    to cache misses and skipped writes.
    """

    def __init__(
        self,
        store: AbstractCacheStore,
        ttls: Mapping[CacheClass, int] | None = None,
    ) -> None:
        self._store = store
        self._ttls = {**DEFAULT_TTLS, **(ttls or {})}

    def default_ttl(self, cache_class: CacheClass | str) -> int:
        return self._ttls[CacheClass(cache_class)]

    def get(self, cache_class: CacheClass | str, fingerprint: str) -> Any | None:
        """Return the cached value, or None on miss."""
        key = build_cache_key(cache_class, fingerprint)
        try:
            raw = self._store.get(key)
        except Exception:
            logger.warning("cache.read_failed", extra={"cache_key": key}, exc_info=True)
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("cache.corrupt_entry", extra={"cache_key": key})
            return None

    def put(
        self,
        cache_class: CacheClass | str,
        fingerprint: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Store a successful result.

        Args:
            cache_class: Category of the result; selects the default TTL.
            fingerprint: Request identity within the class.
            value: JSON-serializable result; ``None`` is refused.
            ttl: Explicit TTL in seconds overriding the class default.

        Returns:
            True if the value was written.
        """
        key = build_cache_key(cache_class, fingerprint)
        if value is None:
            logger.debug("cache.skip_empty", extra={"cache_key": key})
            return False

        ttl_seconds = ttl if ttl is not None else self.default_ttl(cache_class)
        payload = json.dumps(value, separators=(",", ":"))
        try:
            self._store.set(key, payload, ttl_seconds)
        except Exception:
            logger.warning("cache.write_failed", extra={"cache_key": key}, exc_info=True)
            return False
        return True
