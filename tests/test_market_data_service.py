"""Tests for MarketDataService: cache, gate and upstream sequencing."""

from unittest.mock import MagicMock

import httpx
import pytest

from app.adapters.market_data.twelve_data import TwelveDataClient
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.usage_store.base import CounterStoreError
from app.core.errors import (
    BudgetExhaustedAppError,
    RateLimitedAppError,
    StoreUnavailableAppError,
    UpstreamAppError,
    ValidationAppError,
)
from app.services.access_gate import AccessGate
from app.services.market_data_service import MarketDataService, normalize_symbol
from app.services.period_budget import PeriodBudget
from app.services.result_cache import CacheClass, ResultCache
from app.services.usage_reporter import UsageReporter


def _service_with(market_client, result_cache, limiter, budget) -> MarketDataService:
    return MarketDataService(
        market_client,
        AccessGate(limiter, budget),
        result_cache,
        UsageReporter(limiter, budget),
        symbols=["SPY", "DIA"],
    )


class TestNormalizeSymbol:
    @pytest.mark.parametrize(
        "raw,expected",
        [("spy", "SPY"), (" EUR-USD ", "EUR/USD"), ("BTC/USD", "BTC/USD")],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        assert normalize_symbol(raw) == expected

    def test_rejects_blank(self) -> None:
        with pytest.raises(ValidationAppError):
            normalize_symbol("  ")


class TestFetchQuotes:
    def test_miss_calls_upstream_counts_and_caches(
        self, service: MarketDataService, market_client, budget: PeriodBudget, result_cache: ResultCache
    ) -> None:
        response = service.fetch_quotes()

        assert response.cached is False
        assert set(response.quotes) == {"SPY", "DIA", "QQQ", "IWM"}
        assert market_client.quote_calls == [["SPY", "DIA", "QQQ", "IWM"]]
        assert budget.current_usage() == 1
        assert result_cache.get(CacheClass.QUOTES, "all") == response.quotes

    def test_hit_skips_gate_and_upstream(
        self, service: MarketDataService, market_client, budget: PeriodBudget, limiter
    ) -> None:
        service.fetch_quotes()
        second = service.fetch_quotes()

        assert second.cached is True
        assert len(market_client.quote_calls) == 1
        assert budget.current_usage() == 1
        assert limiter.current_count() == 1

    def test_expired_entry_triggers_new_fetch(self, service: MarketDataService, market_client, clock) -> None:
        service.fetch_quotes()
        clock.advance(120)

        assert service.fetch_quotes().cached is False
        assert len(market_client.quote_calls) == 2

    def test_rate_limited_raises_without_upstream_call(
        self, market_client, result_cache: ResultCache, budget: PeriodBudget, clock
    ) -> None:
        limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)
        service = _service_with(market_client, result_cache, limiter, budget)
        service.fetch_history("SPY")

        with pytest.raises(RateLimitedAppError) as exc_info:
            service.fetch_quotes()

        assert exc_info.value.details["retry_after_seconds"] == 60
        assert market_client.quote_calls == []

    def test_budget_exhausted_raises_without_upstream_call(
        self, market_client, result_cache: ResultCache, limiter
    ) -> None:
        store = MagicMock()
        store.get.return_value = "500"
        service = _service_with(market_client, result_cache, limiter, PeriodBudget(store, limit=500))

        with pytest.raises(BudgetExhaustedAppError) as exc_info:
            service.fetch_quotes()

        assert exc_info.value.message == "Monthly API budget exhausted (500/500)"
        assert market_client.quote_calls == []
        store.increment.assert_not_called()

    def test_upstream_failure_is_not_cached_or_counted(
        self, service: MarketDataService, market_client, budget: PeriodBudget, result_cache: ResultCache, limiter
    ) -> None:
        market_client.error = UpstreamAppError(code="upstream_failure", message="boom")

        with pytest.raises(UpstreamAppError):
            service.fetch_quotes()

        assert budget.current_usage() == 0
        assert result_cache.get(CacheClass.QUOTES, "all") is None
        # The attempt still occupies a minute slot.
        assert limiter.current_count() == 1

    def test_increment_failure_still_returns_result(
        self, market_client, result_cache: ResultCache, limiter
    ) -> None:
        store = MagicMock()
        store.get.return_value = "3"
        store.increment.side_effect = CounterStoreError("down")
        service = _service_with(market_client, result_cache, limiter, PeriodBudget(store))

        response = service.fetch_quotes()

        assert response.cached is False
        assert store.increment.call_count == 2
        assert result_cache.get(CacheClass.QUOTES, "all") is not None

    def test_unreadable_budget_raises_store_unavailable(
        self, market_client, result_cache: ResultCache, limiter
    ) -> None:
        store = MagicMock()
        store.get.side_effect = CounterStoreError("down")
        service = _service_with(market_client, result_cache, limiter, PeriodBudget(store))

        with pytest.raises(StoreUnavailableAppError):
            service.fetch_quotes()

        assert market_client.quote_calls == []
        # The minute slot taken before the budget read stays consumed.
        assert limiter.current_count() == 1


class TestFetchHistory:
    def test_history_is_cached_per_symbol(self, service: MarketDataService, market_client) -> None:
        first = service.fetch_history("spy")
        again = service.fetch_history("SPY")
        other = service.fetch_history("DIA")

        assert first.symbol == "SPY"
        assert first.cached is False
        assert again.cached is True
        assert other.cached is False
        assert market_client.history_calls == ["SPY", "DIA"]
        assert len(first.series["values"]) == 30

    def test_history_ttl_is_longer_than_quotes(self, service: MarketDataService, clock) -> None:
        service.fetch_history("SPY")
        clock.advance(200)

        assert service.fetch_history("SPY").cached is True

        clock.advance(100)
        assert service.fetch_history("SPY").cached is False

    def test_dash_symbols_map_to_slash(self, service: MarketDataService, market_client) -> None:
        response = service.fetch_history("eur-usd")

        assert response.symbol == "EUR/USD"
        assert market_client.history_calls == ["EUR/USD"]


def test_usage_snapshot_reflects_recorded_calls(service: MarketDataService) -> None:
    service.fetch_quotes()
    service.fetch_history("SPY")

    snapshot = service.usage_snapshot()

    assert snapshot.monthly_used == 2
    assert snapshot.minute_used == 2
    assert snapshot.minute_remaining == 18


def test_partial_batch_is_not_cached_or_counted(
    result_cache: ResultCache, limiter, budget: PeriodBudget
) -> None:
    body = {"SPY": {"symbol": "SPY", "close": "512.3"}, "DIA": {"code": 404, "status": "error"}}
    client = TwelveDataClient(
        api_key="k",
        base_url="https://api.twelvedata.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)),
    )
    service = _service_with(client, result_cache, limiter, budget)

    with pytest.raises(UpstreamAppError):
        service.fetch_quotes()

    assert result_cache.get(CacheClass.QUOTES, "all") is None
    assert budget.current_usage() == 0
