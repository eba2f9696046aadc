"""Read-only usage reporting.

Safe to poll: nothing here admits a call or increments the budget, and read
failures produce a conservative fallback instead of an error.
"""

from __future__ import annotations

import logging

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.schemas.usage import UsageSnapshot
from app.services.period_budget import PeriodBudget

logger = logging.getLogger(__name__)


class UsageReporter:
    def __init__(
        self,
        limiter: AbstractRateLimiter,
        budget: PeriodBudget,
        *,
        warning_threshold: float = 80.0,
    ) -> None:
        self.limiter = limiter
        self.budget = budget
        self.warning_threshold = warning_threshold

    def fallback_snapshot(self) -> UsageSnapshot:
        """Zero usage at nominal limits, no warning."""
        return UsageSnapshot(
            monthly_used=0,
            monthly_limit=self.budget.limit,
            monthly_remaining=self.budget.limit,
            monthly_percentage=0.0,
            minute_used=0,
            minute_limit=self.limiter.limit,
            minute_remaining=self.limiter.limit,
            warning_level=False,
        )

    def snapshot(self, now: int | None = None) -> UsageSnapshot:
        try:
            # One store read so the monthly figures agree with each other.
            monthly_used = self.budget.current_usage()
            minute_used = self.limiter.current_count(now)
        except Exception:
            logger.error("usage.snapshot_failed", exc_info=True)
            return self.fallback_snapshot()

        monthly_limit = self.budget.limit
        percentage = monthly_used * 100.0 / monthly_limit
        return UsageSnapshot(
            monthly_used=monthly_used,
            monthly_limit=monthly_limit,
            monthly_remaining=monthly_limit - monthly_used,
            monthly_percentage=percentage,
            minute_used=minute_used,
            minute_limit=self.limiter.limit,
            minute_remaining=max(0, self.limiter.limit - minute_used),
            warning_level=percentage > self.warning_threshold,
        )
