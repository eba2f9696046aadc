"""Persistent counter stores backing the monthly usage budget."""

from app.adapters.usage_store.base import AbstractCounterStore, CounterStoreError
from app.adapters.usage_store.factory import create_counter_store
from app.adapters.usage_store.in_memory import InMemoryCounterStore
from app.adapters.usage_store.redis_store import RedisCounterStore

__all__ = [
    "AbstractCounterStore",
    "CounterStoreError",
    "InMemoryCounterStore",
    "RedisCounterStore",
    "create_counter_store",
]
