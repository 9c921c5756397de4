"""Abstract exchange client interface.

The relay depends only on this interface, keeping bitFlyer-specific
details isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod

from funding_relay.models import FundingRateInfo, TickerSnapshot


class ExchangeClient(ABC):
    """Abstract base class for exchange API clients.

    Implementations raise ``UpstreamFetchError`` for every failure,
    including malformed payloads.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Prepare the client for use."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP sessions and other resources."""
        ...

    @abstractmethod
    async def fetch_ticker(self, product_code: str) -> TickerSnapshot:
        """Fetch the current ticker for a product."""
        ...

    @abstractmethod
    async def fetch_funding_rate(self, product_code: str) -> FundingRateInfo:
        """Fetch the current funding rate and next settlement time for a product."""
        ...
