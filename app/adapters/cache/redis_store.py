"""Redis-backed cache store.

Entries are written with SETEX and expire through Redis itself; nothing is
deleted explicitly.
"""

from __future__ import annotations

import logging

import redis

from app.adapters.cache.base import AbstractCacheStore

logger = logging.getLogger(__name__)


class RedisCacheStore(AbstractCacheStore):
    """Cache entries stored as Redis strings."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def get(self, key: str) -> str | None:
        value = self._client.get(key)
        if value is None:
            logger.debug("cache.miss", extra={"cache_key": key})
            return None
        logger.debug("cache.hit", extra={"cache_key": key})
        return value.decode() if isinstance(value, bytes) else str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.setex(key, ttl_seconds, value)
        logger.debug("cache.set", extra={"cache_key": key, "ttl_s": ttl_seconds})
