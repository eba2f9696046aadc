"""Twelve Data REST client adapter."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.adapters.market_data.base import AbstractMarketDataClient
from app.core.errors import UpstreamAppError

logger = logging.getLogger(__name__)


class TwelveDataClient(AbstractMarketDataClient):
    """Client for the Twelve Data ``/quote`` and ``/time_series`` endpoints.

    Payloads are returned as decoded JSON objects without reshaping. The
    provider reports some failures with HTTP 200 and a body of
    ``{"status": "error", "code": ..., "message": ...}``; those are raised as
    errors too so they never reach the cache.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.twelvedata.com",
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            api_key: Twelve Data API key sent as the ``apikey`` query parameter.
            base_url: API root URL.
            timeout_seconds: Timeout applied to every request.
            transport: Optional transport override (used by tests).
        """
        self._api_key = api_key
        self.client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    def fetch_quotes(self, symbols: list[str]) -> dict[str, Any]:
        payload = self._get("/quote", {"symbol": ",".join(symbols)})
        # A single-symbol request comes back unwrapped.
        if len(symbols) == 1 and "symbol" in payload:
            payload = {symbols[0]: payload}

        # A batch can succeed overall while single symbols fail.
        failed = [
            symbol
            for symbol in symbols
            if not isinstance(payload.get(symbol), dict) or payload[symbol].get("status") == "error"
        ]
        if failed:
            logger.warning(
                "upstream.partial_quotes",
                extra={"endpoint": "/quote", "failed_symbols": failed},
            )
            raise UpstreamAppError(
                code="upstream_failure",
                message=f"Upstream API returned no quote for {', '.join(failed)}",
                details={"endpoint": "/quote", "cause": "partial_response"},
            )
        return payload

    def fetch_time_series(
        self,
        symbol: str,
        *,
        interval: str = "1day",
        outputsize: int = 30,
    ) -> dict[str, Any]:
        return self._get(
            "/time_series",
            {"symbol": symbol, "interval": interval, "outputsize": str(outputsize)},
        )

    def close(self) -> None:
        self.client.close()

    def _get(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            response = self.client.get(endpoint, params={**params, "apikey": self._api_key})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "upstream.request_failed",
                extra={"endpoint": endpoint, "status_code": exc.response.status_code},
            )
            raise UpstreamAppError(
                code="upstream_failure",
                message=f"Upstream API returned HTTP {exc.response.status_code}",
                details={"endpoint": endpoint, "status_code": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "upstream.request_failed",
                extra={"endpoint": endpoint, "error_type": type(exc).__name__},
            )
            raise UpstreamAppError(
                code="upstream_failure",
                message="Upstream API call failed",
                details={"endpoint": endpoint, "cause": type(exc).__name__},
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamAppError(
                code="upstream_failure",
                message="Upstream API returned invalid JSON",
                details={"endpoint": endpoint},
            ) from exc

        if not isinstance(payload, dict):
            raise UpstreamAppError(
                code="upstream_failure",
                message="Upstream API returned an unexpected payload",
                details={"endpoint": endpoint},
            )

        if payload.get("status") == "error":
            logger.warning(
                "upstream.error_payload",
                extra={"endpoint": endpoint, "upstream_code": payload.get("code")},
            )
            raise UpstreamAppError(
                code="upstream_failure",
                message=str(payload.get("message") or "Upstream API reported an error"),
                details={"endpoint": endpoint, "cause": str(payload.get("code"))},
            )

        return payload
