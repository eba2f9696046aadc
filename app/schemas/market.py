"""Pydantic schemas for market data responses.

Upstream payloads are passed through untouched; these models only add the
cache flag and the requested symbol.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class QuotesResponse(BaseModel):
    """Current quotes for every tracked index."""

    quotes: dict[str, Any] = Field(
        ...,
        description="Upstream quote objects keyed by symbol.",
    )
    cached: bool = Field(
        default=False,
        description="True if the response was served from cache.",
    )


class HistoryResponse(BaseModel):
    """Daily history for one index."""

    symbol: str = Field(..., description="Symbol as requested from the upstream API.")
    series: dict[str, Any] = Field(
        ...,
        description="Upstream time series payload (meta and values).",
    )
    cached: bool = Field(
        default=False,
        description="True if the response was served from cache.",
    )
