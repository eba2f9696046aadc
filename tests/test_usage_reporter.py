"""Tests for the read-only UsageReporter."""

from unittest.mock import MagicMock

import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.usage_store.base import CounterStoreError
from app.services.period_budget import PeriodBudget
from app.services.usage_reporter import UsageReporter


def _reporter(used: int, limiter: InMemorySlidingWindowRateLimiter | None = None) -> UsageReporter:
    store = MagicMock()
    store.get.return_value = str(used)
    return UsageReporter(
        limiter or InMemorySlidingWindowRateLimiter(limit=20, window_seconds=60),
        PeriodBudget(store, limit=500),
    )


def test_snapshot_reports_both_windows() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=20, window_seconds=60)
    for _ in range(3):
        limiter.try_admit(1000)

    snapshot = _reporter(125, limiter).snapshot(1000)

    assert snapshot.monthly_used == 125
    assert snapshot.monthly_limit == 500
    assert snapshot.monthly_remaining == 375
    assert snapshot.monthly_percentage == 25.0
    assert snapshot.minute_used == 3
    assert snapshot.minute_limit == 20
    assert snapshot.minute_remaining == 17
    assert snapshot.warning_level is False


@pytest.mark.parametrize("used,warning", [(399, False), (400, False), (401, True), (500, True)])
def test_warning_is_strictly_above_threshold(used: int, warning: bool) -> None:
    assert _reporter(used).snapshot().warning_level is warning


def test_snapshot_does_not_consume_anything(reporter: UsageReporter, limiter, budget) -> None:
    for _ in range(30):
        reporter.snapshot()

    assert limiter.current_count() == 0
    assert budget.current_usage() == 0


def test_store_failure_returns_fallback() -> None:
    store = MagicMock()
    store.get.side_effect = CounterStoreError("down")
    reporter = UsageReporter(
        InMemorySlidingWindowRateLimiter(limit=20, window_seconds=60),
        PeriodBudget(store, limit=500),
    )

    snapshot = reporter.snapshot()

    assert snapshot == reporter.fallback_snapshot()
    assert snapshot.monthly_used == 0
    assert snapshot.monthly_remaining == 500
    assert snapshot.minute_remaining == 20
    assert snapshot.warning_level is False


def test_snapshot_serializes_with_camel_case() -> None:
    data = _reporter(10).snapshot().model_dump(by_alias=True)

    assert set(data) == {
        "monthlyUsed",
        "monthlyLimit",
        "monthlyRemaining",
        "monthlyPercentage",
        "minuteUsed",
        "minuteLimit",
        "minuteRemaining",
        "warningLevel",
    }
    assert data["monthlyPercentage"] == 2.0
