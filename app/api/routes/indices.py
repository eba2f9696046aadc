"""Market index endpoints.

Handlers are plain ``def`` functions: FastAPI runs them on its worker thread
pool, which is where the guard layer's thread locks and the blocking Redis
and upstream clients belong.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.dependencies import get_market_data_service
from app.schemas.market import HistoryResponse, QuotesResponse
from app.services.market_data_service import MarketDataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/indices", tags=["Indices"])

ServiceDep = Annotated[MarketDataService, Depends(get_market_data_service)]


@router.get("", response_model=QuotesResponse)
def list_indices(service: ServiceDep) -> QuotesResponse:
    """Current prices of all tracked indices.

    Served from cache for up to two minutes; otherwise one upstream call
    is spent.

    Raises:
        RateLimitedAppError: 429 when the minute window is full.
        BudgetExhaustedAppError: 429 when the monthly budget is spent.
        UpstreamAppError: 502 when the upstream call fails.
    """
    response = service.fetch_quotes()
    logger.info(
        "indices.listed",
        extra={"symbol_count": len(response.quotes), "cached": response.cached},
    )
    return response


@router.get("/{symbol}/history", response_model=HistoryResponse)
def index_history(symbol: str, service: ServiceDep) -> HistoryResponse:
    """Daily history for one index (URL-safe symbols use ``-`` for ``/``)."""
    response = service.fetch_history(symbol)
    logger.info(
        "indices.history",
        extra={"symbol": response.symbol, "cached": response.cached},
    )
    return response
