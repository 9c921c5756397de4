"""Data models for relayed market snapshots.

Exchange values are stored verbatim: timestamps stay as the strings the
exchange sent and ticker fields are passed through untouched, so a stored
snapshot can always be compared byte-for-byte with the exchange response.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class TickerSnapshot:
    """Current ticker for one product as returned by the exchange.

    ``fields`` holds the complete raw payload (best bid/ask, volume, ...),
    including ``product_code`` and ``timestamp`` themselves.
    """

    product_code: str
    timestamp: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FundingRateInfo:
    """Current funding rate and the next settlement time for one product."""

    current_funding_rate: float
    next_funding_rate_settledate: str


@dataclass(frozen=True)
class PersistedRecord:
    """Merged snapshot written to the document store."""

    product_code: str
    ticker: TickerSnapshot
    current_funding_rate: float
    next_funding_rate_settledate: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def merge(
        cls,
        product_code: str,
        ticker: TickerSnapshot,
        funding: FundingRateInfo,
        created_at: datetime | None = None,
    ) -> "PersistedRecord":
        """Build a record from one ticker and one funding-rate reading."""
        return cls(
            product_code=product_code,
            ticker=ticker,
            current_funding_rate=funding.current_funding_rate,
            next_funding_rate_settledate=funding.next_funding_rate_settledate,
            created_at=created_at or datetime.now(timezone.utc),
        )

    @property
    def timestamp(self) -> str:
        return self.ticker.timestamp

    @property
    def document_key(self) -> str:
        """Key derived from the ticker's own product code, not the request's."""
        return f"{self.ticker.product_code}_{self.ticker.timestamp}"

    def to_fields(self) -> dict[str, Any]:
        """Return the field mapping persisted under ``document_key``."""
        return {
            "product_code": self.product_code,
            "ticker": dict(self.ticker.fields),
            "current_funding_rate": self.current_funding_rate,
            "next_funding_rate_settledate": self.next_funding_rate_settledate,
            "timestamp": self.ticker.timestamp,
            "created_at": self.created_at,
        }
