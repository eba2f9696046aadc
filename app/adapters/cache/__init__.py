"""Key/value stores with per-entry TTL backing the result cache."""

from app.adapters.cache.base import AbstractCacheStore
from app.adapters.cache.factory import create_cache_store
from app.adapters.cache.in_memory import InMemoryTTLCacheStore
from app.adapters.cache.redis_store import RedisCacheStore

__all__ = [
    "AbstractCacheStore",
    "InMemoryTTLCacheStore",
    "RedisCacheStore",
    "create_cache_store",
]
