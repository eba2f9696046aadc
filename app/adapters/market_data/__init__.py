"""Upstream market data adapters."""

from app.adapters.market_data.base import AbstractMarketDataClient
from app.adapters.market_data.factory import create_market_data_client
from app.adapters.market_data.twelve_data import TwelveDataClient

__all__ = [
    "AbstractMarketDataClient",
    "TwelveDataClient",
    "create_market_data_client",
]
