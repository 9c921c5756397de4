"""Exchange client layer -- bitFlyer Lightning public API via ccxt."""

from funding_relay.exchange.bitflyer_client import BitflyerClient
from funding_relay.exchange.client import ExchangeClient

__all__ = ["BitflyerClient", "ExchangeClient"]
