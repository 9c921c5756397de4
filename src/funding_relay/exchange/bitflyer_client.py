"""bitFlyer Lightning exchange client implementation via ccxt async.

Calls the raw public ``getticker`` and ``getfundingrate`` endpoints through
ccxt's request layer instead of the unified ``fetch_ticker``: the snapshot
keeps bitFlyer's own product codes (``FX_BTC_JPY``) and field names, which
the unified ticker would rename.
"""

from typing import Any

import ccxt.async_support as ccxt_async

from funding_relay.config import ExchangeSettings
from funding_relay.exceptions import UpstreamFetchError
from funding_relay.exchange.client import ExchangeClient
from funding_relay.logging import get_logger
from funding_relay.models import FundingRateInfo, TickerSnapshot

logger = get_logger(__name__)


class BitflyerClient(ExchangeClient):
    """Concrete bitFlyer client using ccxt async."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings

        config: dict = {
            "apiKey": settings.api_key.get_secret_value(),
            "secret": settings.api_secret.get_secret_value(),
            "enableRateLimit": True,
            "timeout": int(settings.request_timeout * 1000),  # ccxt wants ms
        }

        self._exchange = ccxt_async.bitflyer(config)

    @property
    def exchange(self) -> ccxt_async.bitflyer:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def connect(self) -> None:
        """No markets to preload: raw endpoints take bitFlyer product codes directly."""
        logger.info("bitflyer_client_ready", timeout=self._settings.request_timeout)

    async def close(self) -> None:
        """Clean up ccxt async resources. Must be called to avoid leaking the aiohttp session."""
        logger.info("closing_bitflyer_connection")
        await self._exchange.close()
        logger.info("bitflyer_connection_closed")

    async def fetch_ticker(self, product_code: str) -> TickerSnapshot:
        """Fetch ``GET /v1/getticker`` and keep every field as sent."""
        payload = await self._public_get("getticker", product_code)

        ticker_code = payload.get("product_code")
        timestamp = payload.get("timestamp")
        if not isinstance(ticker_code, str) or not isinstance(timestamp, str):
            raise UpstreamFetchError(
                f"Malformed ticker for {product_code}: "
                f"product_code={ticker_code!r} timestamp={timestamp!r}"
            )

        logger.debug("ticker_fetched", product_code=ticker_code, timestamp=timestamp)
        return TickerSnapshot(product_code=ticker_code, timestamp=timestamp, fields=payload)

    async def fetch_funding_rate(self, product_code: str) -> FundingRateInfo:
        """Fetch ``GET /v1/getfundingrate``."""
        payload = await self._public_get("getfundingrate", product_code)

        settledate = payload.get("next_funding_rate_settledate")
        try:
            rate = float(payload["current_funding_rate"])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamFetchError(
                f"Malformed funding rate for {product_code}: {payload!r}"
            ) from exc
        if not isinstance(settledate, str):
            raise UpstreamFetchError(
                f"Malformed funding rate for {product_code}: "
                f"next_funding_rate_settledate={settledate!r}"
            )

        logger.debug(
            "funding_rate_fetched",
            product_code=product_code,
            current_funding_rate=rate,
            next_funding_rate_settledate=settledate,
        )
        return FundingRateInfo(
            current_funding_rate=rate,
            next_funding_rate_settledate=settledate,
        )

    async def _public_get(self, path: str, product_code: str) -> dict[str, Any]:
        """Call a public endpoint, translating ccxt failures into UpstreamFetchError."""
        try:
            payload = await self._exchange.request(
                path, "public", "GET", {"product_code": product_code}
            )
        except ccxt_async.BaseError as exc:
            raise UpstreamFetchError(
                f"bitFlyer {path} failed for {product_code}: {exc}"
            ) from exc

        if not isinstance(payload, dict):
            raise UpstreamFetchError(
                f"bitFlyer {path} returned {type(payload).__name__} for {product_code}"
            )
        return payload
