"""Shared test fixtures for the funding rate relay."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from funding_relay.config import AppSettings, ExchangeSettings, StoreSettings
from funding_relay.models import FundingRateInfo, TickerSnapshot
from funding_relay.store.sqlite_store import SqliteDocumentStore

PROJECT_ID = "test-project"

# Mimics bitFlyer GET /v1/getticker for FX_BTC_JPY
TICKER_PAYLOAD = {
    "product_code": "FX_BTC_JPY",
    "state": "RUNNING",
    "timestamp": "T1",
    "tick_id": 3579,
    "best_bid": 30000,
    "best_ask": 36640,
    "best_bid_size": 0.1,
    "best_ask_size": 5,
    "total_bid_depth": 15.13,
    "total_ask_depth": 20,
    "market_bid_size": 0,
    "market_ask_size": 0,
    "ltp": 31690,
    "volume": 16819.26,
    "volume_by_product": 6819.26,
}


def make_ticker(product_code: str = "FX_BTC_JPY", timestamp: str = "T1") -> TickerSnapshot:
    fields = {**TICKER_PAYLOAD, "product_code": product_code, "timestamp": timestamp}
    return TickerSnapshot(product_code=product_code, timestamp=timestamp, fields=fields)


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (shared secret set, SQLite backend)."""
    return AppSettings(
        project_id=PROJECT_ID,  # type: ignore[arg-type]
        log_level="DEBUG",
        exchange=ExchangeSettings(request_timeout=1.0),
        store=StoreSettings(backend="sqlite", sqlite_path=":memory:", write_timeout=1.0),
    )


@pytest.fixture
def ticker_factory():
    """Build a TickerSnapshot for another product code or timestamp."""
    return make_ticker


@pytest.fixture
def ticker() -> TickerSnapshot:
    return make_ticker()


@pytest.fixture
def funding() -> FundingRateInfo:
    return FundingRateInfo(current_funding_rate=0.0001, next_funding_rate_settledate="T2")


@pytest.fixture
def mock_exchange(ticker: TickerSnapshot, funding: FundingRateInfo) -> AsyncMock:
    """Mock ExchangeClient returning the sample ticker and funding rate."""
    exchange = AsyncMock()
    exchange.fetch_ticker = AsyncMock(return_value=ticker)
    exchange.fetch_funding_rate = AsyncMock(return_value=funding)
    return exchange


@pytest.fixture
def mock_store() -> AsyncMock:
    """Mock DocumentStore that accepts every upsert."""
    store = AsyncMock()
    store.upsert_document = AsyncMock(return_value=None)
    return store


@pytest_asyncio.fixture
async def sqlite_store():
    """Connected in-memory SQLite document store."""
    store = SqliteDocumentStore(":memory:")
    await store.connect()
    yield store
    await store.close()
