"""Single choke point every upstream fetch passes through.

The gate checks the in-memory minute window first and the persisted monthly
budget second. A denial is returned as a value, never raised.

Admission sequence for callers::

    admission = gate.try_admit()
    if not admission.allowed:
        ...  # report admission.reason, do not call upstream
    result = call_upstream()  # may fail; the minute slot stays consumed
    gate.record_success()     # only after a confirmed success
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.usage_store.base import CounterStoreError
from app.services.period_budget import PeriodBudget

logger = logging.getLogger(__name__)


class DenialReason(str, Enum):
    RATE_LIMITED = "rate_limited"
    BUDGET_EXHAUSTED = "budget_exhausted"


@dataclass(frozen=True)
class Admission:
    """Outcome of a gate check.

    Attributes:
        allowed: Whether the caller may perform the upstream call.
        reason: Why the call was denied (None when allowed).
        retry_after_seconds: Wait before the minute window frees a slot
            (rate limited only).
        current_usage: Calls counted this month (budget exhausted only).
        limit: Monthly limit (budget exhausted only).
    """

    allowed: bool
    reason: DenialReason | None = None
    retry_after_seconds: int | None = None
    current_usage: int | None = None
    limit: int | None = None

    @classmethod
    def allow(cls) -> "Admission":
        return cls(allowed=True)

    @classmethod
    def rate_limited(cls, retry_after_seconds: int) -> "Admission":
        return cls(
            allowed=False,
            reason=DenialReason.RATE_LIMITED,
            retry_after_seconds=retry_after_seconds,
        )

    @classmethod
    def budget_exhausted(cls, used: int, limit: int) -> "Admission":
        return cls(
            allowed=False,
            reason=DenialReason.BUDGET_EXHAUSTED,
            current_usage=used,
            limit=limit,
        )


class AccessGate:
    """Composes the minute limiter and the monthly budget.

    A call denied by the budget still occupies the minute-window slot it was
    granted in the first step. The window counts attempts, not successes,
    which also bounds retry storms after upstream failures.
    """

    def __init__(
        self,
        limiter: AbstractRateLimiter,
        budget: PeriodBudget,
        *,
        increment_attempts: int = 2,
    ) -> None:
        if increment_attempts < 1:
            raise ValueError("increment_attempts must be >= 1")

        self.limiter = limiter
        self.budget = budget
        self._increment_attempts = increment_attempts

    def try_admit(self, now: int | None = None) -> Admission:
        """Decide whether one upstream call may proceed.

        Args:
            now: Current epoch second forwarded to the limiter.

        Returns:
            Admission describing the decision.

        Raises:
            CounterStoreError: If the budget store cannot be read.
        """
        admitted, retry_after = self.limiter.try_admit_or_wait(now)
        if not admitted:
            logger.warning(
                "gate.rate_limited",
                extra={
                    "limit": self.limiter.limit,
                    "window_s": self.limiter.window_seconds,
                    "retry_after_s": retry_after,
                },
            )
            return Admission.rate_limited(retry_after)

        used = self.budget.current_usage()
        if used >= self.budget.limit:
            logger.warning(
                "gate.budget_exhausted",
                extra={"used": used, "limit": self.budget.limit},
            )
            return Admission.budget_exhausted(used, self.budget.limit)

        logger.info(
            "gate.allowed",
            extra={
                "minute_remaining": self.limiter.remaining(now),
                "monthly_used": used,
                "monthly_limit": self.budget.limit,
            },
        )
        return Admission.allow()

    def record_success(self) -> bool:
        """Count a completed upstream call against the monthly budget.

        Never raises: if the store stays unavailable after the configured
        attempts the failure is logged and usage tracking is behind by one.

        Returns:
            True if the increment was persisted.
        """
        key = self.budget.period_key()
        for attempt in range(1, self._increment_attempts + 1):
            try:
                usage = self.budget.increment()
            except CounterStoreError as exc:
                logger.warning(
                    "budget.increment_retry",
                    extra={
                        "usage_key": key,
                        "attempt": attempt,
                        "max_attempts": self._increment_attempts,
                        "error_msg": str(exc),
                    },
                )
                continue

            logger.info(
                "budget.incremented",
                extra={"usage_key": key, "monthly_used": usage, "monthly_limit": self.budget.limit},
            )
            return True

        logger.error(
            "budget.increment_failed",
            extra={"usage_key": key, "attempts": self._increment_attempts},
        )
        return False
