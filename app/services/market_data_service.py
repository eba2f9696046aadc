"""Market data service guarding every upstream call.

Each fetch follows the same sequence:
1. Serve from the result cache when possible
2. Ask the access gate for admission (minute window, then monthly budget)
3. Call the upstream API
4. On success, count the call against the budget and cache the result

Denials and upstream failures are raised as AppError subclasses; none of
them writes to the cache or touches the budget.

If the budget store cannot be read in step 2, the minute slot taken in that
step stays consumed and the caller gets ``usage_store_unavailable`` (503)
instead of a denial.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from app.adapters.market_data.base import AbstractMarketDataClient
from app.adapters.usage_store.base import CounterStoreError
from app.core.errors import (
    BudgetExhaustedAppError,
    RateLimitedAppError,
    StoreUnavailableAppError,
    UpstreamAppError,
    ValidationAppError,
)
from app.schemas.market import HistoryResponse, QuotesResponse
from app.schemas.usage import UsageSnapshot
from app.services.access_gate import AccessGate, Admission, DenialReason
from app.services.result_cache import CacheClass, ResultCache
from app.services.usage_reporter import UsageReporter

logger = logging.getLogger(__name__)

QUOTES_FINGERPRINT = "all"


def normalize_symbol(symbol: str) -> str:
    """Map a URL-safe symbol (``EUR-USD``) to the upstream form (``EUR/USD``)."""
    cleaned = symbol.strip().upper().replace("-", "/")
    if not cleaned:
        raise ValidationAppError(code="invalid_symbol", message="Symbol must not be empty")
    return cleaned


def _raise_for_denial(admission: Admission) -> None:
    if admission.reason is DenialReason.RATE_LIMITED:
        raise RateLimitedAppError.for_retry_after(admission.retry_after_seconds or 0)
    raise BudgetExhaustedAppError.for_usage(admission.current_usage or 0, admission.limit or 0)


class MarketDataService:
    """Fetches quotes and history through the cache and the access gate.

    Attributes:
        client: Upstream market data client.
        gate: Access gate holding the minute limiter and monthly budget.
        cache: Result cache for successful fetches.
        reporter: Read-only usage reporter.
        symbols: Symbols returned by the quotes fetch.
    """

    def __init__(
        self,
        client: AbstractMarketDataClient,
        gate: AccessGate,
        cache: ResultCache,
        reporter: UsageReporter,
        *,
        symbols: list[str],
        history_interval: str = "1day",
        history_outputsize: int = 30,
    ) -> None:
        self.client = client
        self.gate = gate
        self.cache = cache
        self.reporter = reporter
        self.symbols = symbols
        self.history_interval = history_interval
        self.history_outputsize = history_outputsize

    def _guarded_fetch(
        self,
        cache_class: CacheClass,
        fingerprint: str,
        fetch: Callable[[], dict[str, Any]],
    ) -> tuple[dict[str, Any], bool]:
        """Run ``fetch`` behind the cache and the gate.

        Returns:
            Tuple of (payload, served_from_cache).
        """
        cached = self.cache.get(cache_class, fingerprint)
        if cached is not None:
            return cached, True

        try:
            admission = self.gate.try_admit()
        except CounterStoreError as exc:
            logger.error(
                "gate.store_unavailable",
                extra={"cache_class": cache_class.value, "error_msg": str(exc)},
            )
            raise StoreUnavailableAppError(
                code="usage_store_unavailable",
                message="Usage tracking is temporarily unavailable. Try again later.",
            ) from exc

        if not admission.allowed:
            _raise_for_denial(admission)

        try:
            payload = fetch()
        except UpstreamAppError:
            logger.error(
                "upstream.fetch_failed",
                extra={"cache_class": cache_class.value, "fingerprint": fingerprint},
            )
            raise

        # The result is returned even if the usage increment could not be saved.
        self.gate.record_success()
        self.cache.put(cache_class, fingerprint, payload)
        return payload, False

    def fetch_quotes(self) -> QuotesResponse:
        """Current quotes for all tracked symbols.

        Raises:
            RateLimitedAppError: Minute window exhausted.
            BudgetExhaustedAppError: Monthly budget exhausted.
            UpstreamAppError: Upstream call failed.
        """
        payload, cached = self._guarded_fetch(
            CacheClass.QUOTES,
            QUOTES_FINGERPRINT,
            lambda: self.client.fetch_quotes(self.symbols),
        )
        return QuotesResponse(quotes=payload, cached=cached)

    def fetch_history(self, symbol: str) -> HistoryResponse:
        """Daily history for ``symbol``; same errors as ``fetch_quotes``."""
        api_symbol = normalize_symbol(symbol)
        payload, cached = self._guarded_fetch(
            CacheClass.HISTORY,
            api_symbol,
            lambda: self.client.fetch_time_series(
                api_symbol,
                interval=self.history_interval,
                outputsize=self.history_outputsize,
            ),
        )
        return HistoryResponse(symbol=api_symbol, series=payload, cached=cached)

    def usage_snapshot(self) -> UsageSnapshot:
        """Current usage figures; never raises."""
        return self.reporter.snapshot()
