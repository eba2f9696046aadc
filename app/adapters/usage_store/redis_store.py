"""Redis-backed counter store.

INCRBY and EXPIRE are sent in one MULTI/EXEC pipeline so concurrent
incrementers in any number of processes never lose an update.
"""

from __future__ import annotations

import redis

from app.adapters.usage_store.base import AbstractCounterStore, CounterStoreError


class RedisCounterStore(AbstractCounterStore):
    """Counters stored as integer strings in Redis."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def increment(self, key: str, *, ttl_seconds: int, amount: int = 1) -> int:
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.incrby(key, amount)
            pipe.expire(key, ttl_seconds)
            value, _ = pipe.execute()
        except redis.RedisError as exc:
            raise CounterStoreError(f"Failed to increment {key}: {exc}") from exc
        return int(value)

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except redis.RedisError as exc:
            raise CounterStoreError(f"Failed to read {key}: {exc}") from exc
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            raise CounterStoreError(f"Failed to delete {key}: {exc}") from exc
