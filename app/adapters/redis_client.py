"""Shared Redis client construction."""

from __future__ import annotations

import redis

from app.core.config import StoreSettings, settings


def create_redis_client(store_settings: StoreSettings | None = None) -> redis.Redis:
    """Build a Redis client from configuration.

    The client keeps its own connection pool and is safe to share between
    threads. Responses are decoded to ``str``.
    """
    cfg = store_settings or settings.store
    return redis.Redis.from_url(
        cfg.redis_url,
        decode_responses=True,
        socket_timeout=cfg.socket_timeout_seconds,
        socket_connect_timeout=cfg.socket_timeout_seconds,
    )
