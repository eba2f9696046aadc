"""Process-wide service wiring for FastAPI routes.

Routes depend on ``get_market_data_service`` only. The limiter must be a
single instance per process so its window is shared by all requests; the
Redis client and upstream HTTP client are shared for their connection pools.

Everything is built lazily on first use, so importing the app never opens
a connection. Tests can swap the service via ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
import threading
from zoneinfo import ZoneInfo

import redis

from app.adapters.cache.factory import create_cache_store
from app.adapters.market_data.base import AbstractMarketDataClient
from app.adapters.market_data.factory import create_market_data_client
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.redis_client import create_redis_client
from app.adapters.usage_store.factory import create_counter_store
from app.core.config import settings
from app.services.access_gate import AccessGate
from app.services.market_data_service import MarketDataService
from app.services.period_budget import PeriodBudget
from app.services.result_cache import CacheClass, ResultCache
from app.services.usage_reporter import UsageReporter

logger = logging.getLogger(__name__)

_lock = threading.RLock()
_redis_client: redis.Redis | None = None
_limiter: AbstractRateLimiter | None = None
_budget: PeriodBudget | None = None
_reporter: UsageReporter | None = None
_market_client: AbstractMarketDataClient | None = None
_service: MarketDataService | None = None


def _get_redis_client() -> redis.Redis | None:
    global _redis_client

    if settings.store.backend != "redis":
        return None
    if _redis_client is None:
        _redis_client = create_redis_client(settings.store)
    return _redis_client


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide sliding-window limiter."""
    global _limiter

    with _lock:
        if _limiter is None:
            _limiter = InMemorySlidingWindowRateLimiter(
                limit=settings.app.minute_limit,
                window_seconds=settings.app.minute_window_seconds,
            )
        return _limiter


def get_period_budget() -> PeriodBudget:
    """Return the monthly budget bound to the configured counter store."""
    global _budget

    with _lock:
        if _budget is None:
            _budget = PeriodBudget(
                create_counter_store(_get_redis_client()),
                limit=settings.app.monthly_limit,
                key_prefix=settings.app.usage_key_prefix,
                tz=ZoneInfo(settings.app.budget_timezone),
            )
        return _budget


def get_usage_reporter() -> UsageReporter:
    """FastAPI dependency for the read-only usage reporter.

    Does not need the upstream client, so usage stays observable even when
    the upstream API key is missing.
    """
    global _reporter

    with _lock:
        if _reporter is None:
            _reporter = UsageReporter(
                get_rate_limiter(),
                get_period_budget(),
                warning_threshold=settings.app.usage_warning_threshold,
            )
        return _reporter


def build_market_data_service() -> MarketDataService:
    """Assemble the service graph from settings."""
    global _market_client

    limiter = get_rate_limiter()
    budget = get_period_budget()
    gate = AccessGate(
        limiter,
        budget,
        increment_attempts=settings.app.budget_increment_attempts,
    )
    cache = ResultCache(
        create_cache_store(_get_redis_client()),
        ttls={
            CacheClass.QUOTES: settings.app.quotes_cache_ttl_seconds,
            CacheClass.HISTORY: settings.app.history_cache_ttl_seconds,
        },
    )

    _market_client = create_market_data_client()

    logger.info(
        "services.initialized",
        extra={
            "store_backend": settings.store.backend,
            "minute_limit": limiter.limit,
            "window_s": limiter.window_seconds,
            "monthly_limit": budget.limit,
        },
    )
    return MarketDataService(
        _market_client,
        gate,
        cache,
        get_usage_reporter(),
        symbols=settings.upstream.symbol_list,
        history_interval=settings.upstream.history_interval,
        history_outputsize=settings.upstream.history_outputsize,
    )


def get_market_data_service() -> MarketDataService:
    """FastAPI dependency returning the shared MarketDataService."""
    global _service

    if _service is None:
        with _lock:
            if _service is None:
                _service = build_market_data_service()
    return _service


def close_dependencies() -> None:
    """Release network clients and forget the wiring (used on shutdown)."""
    global _redis_client, _limiter, _budget, _reporter, _market_client, _service

    with _lock:
        if _market_client is not None:
            _market_client.close()
        if _redis_client is not None:
            _redis_client.close()
        _redis_client = None
        _limiter = None
        _budget = None
        _reporter = None
        _market_client = None
        _service = None
