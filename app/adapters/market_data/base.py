from abc import ABC, abstractmethod
from typing import Any


class AbstractMarketDataClient(ABC):
	"""Interface for upstream quote/history providers."""

	@abstractmethod
	def fetch_quotes(self, symbols: list[str]) -> dict[str, Any]:
		"""Fetch current quotes for several symbols in one upstream call.

		Args:
			symbols: Ticker symbols to quote.

		Returns:
			dict[str, Any]: Provider payload keyed by symbol.

		Raises:
			UpstreamAppError: If the call fails or the provider reports an error.
		"""
		...

	@abstractmethod
	def fetch_time_series(
		self,
		symbol: str,
		*,
		interval: str,
		outputsize: int,
	) -> dict[str, Any]:
		"""Fetch historical bars for one symbol.

		Raises:
			UpstreamAppError: If the call fails or the provider reports an error.
		"""
		...

	def close(self) -> None:
		"""Release network resources held by the client."""
