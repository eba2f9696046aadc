"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any app module is imported so the
settings object is built with the in-memory store and a dummy upstream key.
"""

import os
from datetime import datetime, timezone, tzinfo
from typing import Any

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("TWELVE_DATA_API_KEY", "test-twelve-data-key")
os.environ.setdefault("LOG_FORMAT", "plain")

import pytest

from app.adapters.cache.in_memory import InMemoryTTLCacheStore
from app.adapters.market_data.base import AbstractMarketDataClient
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.usage_store.in_memory import InMemoryCounterStore
from app.services.access_gate import AccessGate
from app.services.market_data_service import MarketDataService
from app.services.period_budget import PeriodBudget
from app.services.result_cache import ResultCache
from app.services.usage_reporter import UsageReporter


class FakeClock:
    """Deterministic epoch clock shared by limiter, stores and budget."""

    def __init__(self, start: float = 1_792_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def now(self, tz: tzinfo | None = None) -> datetime:
        return datetime.fromtimestamp(self.current, tz or timezone.utc)

    def advance(self, seconds: float) -> None:
        self.current += seconds


class FakeMarketDataClient(AbstractMarketDataClient):
    """Upstream stand-in recording calls; raises ``error`` when set."""

    def __init__(self) -> None:
        self.quote_calls: list[list[str]] = []
        self.history_calls: list[str] = []
        self.error: Exception | None = None

    def fetch_quotes(self, symbols: list[str]) -> dict[str, Any]:
        self.quote_calls.append(list(symbols))
        if self.error:
            raise self.error
        return {s: {"symbol": s, "close": "100.0"} for s in symbols}

    def fetch_time_series(self, symbol: str, *, interval: str, outputsize: int) -> dict[str, Any]:
        self.history_calls.append(symbol)
        if self.error:
            raise self.error
        return {
            "meta": {"symbol": symbol, "interval": interval},
            "values": [{"datetime": "2026-10-16", "close": "100.0"}] * outputsize,
        }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(limit=20, window_seconds=60, clock=clock)


@pytest.fixture
def counter_store(clock: FakeClock) -> InMemoryCounterStore:
    return InMemoryCounterStore(clock=clock)


@pytest.fixture
def budget(counter_store: InMemoryCounterStore, clock: FakeClock) -> PeriodBudget:
    return PeriodBudget(counter_store, limit=500, now_fn=clock.now)


@pytest.fixture
def cache_store(clock: FakeClock) -> InMemoryTTLCacheStore:
    return InMemoryTTLCacheStore(max_entries=None, clock=clock)


@pytest.fixture
def result_cache(cache_store: InMemoryTTLCacheStore) -> ResultCache:
    return ResultCache(cache_store)


@pytest.fixture
def gate(limiter: InMemorySlidingWindowRateLimiter, budget: PeriodBudget) -> AccessGate:
    return AccessGate(limiter, budget)


@pytest.fixture
def reporter(limiter: InMemorySlidingWindowRateLimiter, budget: PeriodBudget) -> UsageReporter:
    return UsageReporter(limiter, budget)


@pytest.fixture
def market_client() -> FakeMarketDataClient:
    return FakeMarketDataClient()


@pytest.fixture
def service(
    market_client: FakeMarketDataClient,
    gate: AccessGate,
    result_cache: ResultCache,
    reporter: UsageReporter,
) -> MarketDataService:
    return MarketDataService(
        market_client,
        gate,
        result_cache,
        reporter,
        symbols=["SPY", "DIA", "QQQ", "IWM"],
    )
