"""Factory for the configured cache store."""

from __future__ import annotations

import redis

from app.adapters.cache.base import AbstractCacheStore
from app.adapters.cache.in_memory import InMemoryTTLCacheStore
from app.adapters.cache.redis_store import RedisCacheStore
from app.core.config import settings
from app.core.errors import ValidationAppError


def create_cache_store(redis_client: redis.Redis | None = None) -> AbstractCacheStore:
    """Instantiate the cache store selected by ``STORE_BACKEND``."""
    if settings.store.backend == "memory":
        return InMemoryTTLCacheStore(max_entries=settings.app.cache_max_entries)

    if redis_client is None:
        raise ValidationAppError(
            code="store_missing_client",
            message="Redis store backend selected but no Redis client was provided",
        )
    return RedisCacheStore(redis_client)
