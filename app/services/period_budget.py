"""Calendar-month request budget persisted in a shared counter store.

Each month is counted under its own key (``api:usage:YYYY-MM``), so a new
month simply starts reading a key that does not exist yet. No reset job is
needed: every increment pushes the key's expiry past the end of the
following month and the store reclaims it after that.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable

from app.adapters.usage_store.base import AbstractCounterStore

logger = logging.getLogger(__name__)


def period_id(moment: datetime) -> str:
    """Return the ``YYYY-MM`` identifier of the month containing ``moment``."""
    return f"{moment.year:04d}-{moment.month:02d}"


def _first_of_month(year: int, month: int) -> datetime:
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1)


def expiry_seconds(moment: datetime) -> int:
    """Key lifetime applied on increment.

    Spans the current month and the next one, measured from the first day of
    the current month. Counted from ``moment`` this always reaches past the
    end of the next month, so a live counter is never reclaimed early.
    """
    start = _first_of_month(moment.year, moment.month)
    after_next = _first_of_month(moment.year, moment.month + 2)
    return int((after_next - start).total_seconds())


class PeriodBudget:
    """Monthly call budget.

    The counter value is read from the store on every call and never cached
    locally, since several processes may increment it concurrently.

    Attributes:
        limit: Calls allowed per calendar month.
    """

    def __init__(
        self,
        store: AbstractCounterStore,
        *,
        limit: int = 500,
        key_prefix: str = "api:usage:",
        tz: tzinfo = timezone.utc,
        now_fn: Callable[[tzinfo], datetime] | None = None,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")

        self._store = store
        self._limit = limit
        self._key_prefix = key_prefix
        self._tz = tz
        self._now_fn = now_fn or datetime.now

    @property
    def limit(self) -> int:
        return self._limit

    def _now(self) -> datetime:
        return self._now_fn(self._tz)

    def period_key(self) -> str:
        """Store key of the current month's counter."""
        return f"{self._key_prefix}{period_id(self._now())}"

    def increment(self) -> int:
        """Count one successful upstream call against the current month.

        Returns:
            The month's usage after the increment.

        Raises:
            CounterStoreError: If the store cannot be written.
        """
        now = self._now()
        key = f"{self._key_prefix}{period_id(now)}"
        return self._store.increment(key, ttl_seconds=expiry_seconds(now))

    def current_usage(self) -> int:
        """Calls counted this month (0 when the key is missing or unreadable)."""
        key = self.period_key()
        raw = self._store.get(key)
        if raw is None:
            return 0
        try:
            return int(raw)
        except ValueError:
            logger.warning("budget.invalid_counter", extra={"usage_key": key})
            return 0

    def remaining(self) -> int:
        """Calls left this month; negative when the budget was overrun."""
        return self._limit - self.current_usage()

    def has_remaining(self) -> bool:
        return self.current_usage() < self._limit

    def usage_percentage(self) -> float:
        return self.current_usage() * 100.0 / self._limit

    def reset(self) -> None:
        """Delete the current month's counter."""
        self._store.delete(self.period_key())
