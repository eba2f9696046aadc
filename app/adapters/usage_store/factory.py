"""Factory for the configured counter store."""

from __future__ import annotations

import redis

from app.adapters.usage_store.base import AbstractCounterStore
from app.adapters.usage_store.in_memory import InMemoryCounterStore
from app.adapters.usage_store.redis_store import RedisCounterStore
from app.core.config import settings
from app.core.errors import ValidationAppError


def create_counter_store(redis_client: redis.Redis | None = None) -> AbstractCounterStore:
    """Instantiate the counter store selected by ``STORE_BACKEND``.

    Args:
        redis_client: Client used by the Redis backend.

    Raises:
        ValidationAppError: If the Redis backend is selected without a client.
    """
    backend = settings.store.backend

    if backend == "memory":
        return InMemoryCounterStore()

    if redis_client is None:
        raise ValidationAppError(
            code="store_missing_client",
            message="Redis store backend selected but no Redis client was provided",
        )
    return RedisCounterStore(redis_client)
