"""Factory for creating the upstream market data client."""

from app.adapters.market_data.base import AbstractMarketDataClient
from app.adapters.market_data.twelve_data import TwelveDataClient
from app.core.config import settings
from app.core.errors import ValidationAppError


def create_market_data_client() -> AbstractMarketDataClient:
    """Instantiate the Twelve Data client from settings.

    Raises:
        ValidationAppError: If no API key is configured.
    """
    if not settings.upstream.api_key:
        raise ValidationAppError(
            code="upstream_missing_api_key",
            message="Twelve Data client requires TWELVE_DATA_API_KEY environment variable",
        )
    return TwelveDataClient(
        api_key=settings.upstream.api_key,
        base_url=settings.upstream.base_url,
        timeout_seconds=settings.upstream.timeout_seconds,
    )
