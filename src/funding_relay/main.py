"""Entry point for the funding rate relay.

Builds settings once, wires the exchange client, document store and
TickerRelay, and serves the FastAPI app with uvicorn. The lifespan context
manager connects both collaborators on startup and closes them on shutdown.

Component wiring order (in build_relay):
1. ExchangeClient (BitflyerClient)
2. DocumentStore (Firestore or SQLite per STORE_BACKEND)
3. TickerRelay (request handler)
"""

import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from funding_relay.api import create_app
from funding_relay.config import AppSettings
from funding_relay.exchange.bitflyer_client import BitflyerClient
from funding_relay.handler import TickerRelay
from funding_relay.logging import get_logger, setup_logging
from funding_relay.store import create_store


def build_relay(settings: AppSettings) -> TickerRelay:
    """Create the relay and its collaborators from settings.

    Does NOT connect anything -- that happens in the lifespan.
    """
    logger = get_logger("funding_relay.main")

    if not settings.project_id.get_secret_value():
        logger.warning(
            "no_project_id_configured",
            note="Every /api/get-ticker request will be rejected with 403.",
        )

    exchange_client = BitflyerClient(settings.exchange)
    store = create_store(settings)
    return TickerRelay(settings=settings, exchange=exchange_client, store=store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect exchange client and store on startup, close both on shutdown."""
    logger = get_logger("funding_relay.main")
    relay: TickerRelay = app.state.relay

    await relay.exchange.connect()
    await relay.store.connect()
    logger.info("relay_started")

    try:
        yield
    finally:
        await relay.exchange.close()
        await relay.store.close()
        logger.info("relay_stopped")


async def run() -> None:
    """Run the relay HTTP server until interrupted."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("funding_relay.main")

    # 3. Build components and app
    relay = build_relay(settings)
    app = create_app(relay, lifespan=lifespan)

    logger.info(
        "starting_relay",
        host=settings.server.host,
        port=settings.server.port,
        store_backend=settings.store.backend,
    )

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
