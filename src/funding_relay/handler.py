"""Ticker relay -- fetch, merge and persist one market snapshot per request.

Flow for an accepted request:
1. Reject anything but GET (MethodNotAllowed)
2. Compare the ProjectId header with the configured secret (Forbidden)
3. Resolve the product code, defaulting to the configured product
4. Fetch ticker and funding rate concurrently, each bounded by a timeout
5. Merge into a PersistedRecord stamped with the server time
6. Upsert under ``{ticker.product_code}_{ticker.timestamp}``

Every failure is raised as a RelayError for the caller to render; nothing
here stops the process, so one bad upstream response costs one request.
"""

import asyncio
import hmac

from funding_relay.config import AppSettings
from funding_relay.exceptions import (
    Forbidden,
    MethodNotAllowed,
    PersistError,
    UpstreamFetchError,
)
from funding_relay.exchange.client import ExchangeClient
from funding_relay.logging import get_logger
from funding_relay.models import PersistedRecord
from funding_relay.store.base import DocumentStore

logger = get_logger(__name__)


class TickerRelay:
    """Relays exchange ticker and funding-rate snapshots into a document store.

    Args:
        settings: Application-wide settings (secret, defaults, timeouts).
        exchange: Exchange client shared across requests.
        store: Document store shared across requests.
    """

    def __init__(
        self,
        settings: AppSettings,
        exchange: ExchangeClient,
        store: DocumentStore,
    ) -> None:
        self._settings = settings
        self._exchange = exchange
        self._store = store

    @property
    def exchange(self) -> ExchangeClient:
        return self._exchange

    @property
    def store(self) -> DocumentStore:
        return self._store

    def authorize(self, project_id: str | None) -> None:
        """Raise Forbidden unless ``project_id`` equals the configured secret.

        An empty configured secret rejects every request.
        """
        expected = self._settings.project_id.get_secret_value()
        supplied = project_id or ""
        if not expected or not hmac.compare_digest(
            supplied.encode("utf-8"), expected.encode("utf-8")
        ):
            logger.warning("request_forbidden", header_present=project_id is not None)
            raise Forbidden()

    def resolve_product_code(self, product_code: str | None) -> str:
        return product_code or self._settings.exchange.default_product_code

    async def handle(
        self,
        method: str,
        project_id: str | None,
        product_code: str | None,
    ) -> PersistedRecord:
        """Validate the request, then fetch, merge and persist one snapshot."""
        if method.upper() != "GET":
            raise MethodNotAllowed()
        self.authorize(project_id)
        return await self.relay(self.resolve_product_code(product_code))

    async def relay(self, product_code: str) -> PersistedRecord:
        """Fetch, merge and persist one snapshot for ``product_code``."""
        timeout = self._settings.exchange.request_timeout
        # Both calls are awaited to completion; the ticker error wins if both fail.
        ticker, funding = await asyncio.gather(
            asyncio.wait_for(self._exchange.fetch_ticker(product_code), timeout),
            asyncio.wait_for(self._exchange.fetch_funding_rate(product_code), timeout),
            return_exceptions=True,
        )
        for result in (ticker, funding):
            if isinstance(result, UpstreamFetchError):
                logger.error(
                    "upstream_fetch_failed", product_code=product_code, error=result.message
                )
                raise result
            if isinstance(result, asyncio.TimeoutError):
                logger.error(
                    "upstream_fetch_timeout", product_code=product_code, timeout=timeout
                )
                raise UpstreamFetchError(
                    f"Exchange call for {product_code} timed out after {timeout}s"
                ) from result
            if isinstance(result, Exception):
                logger.error(
                    "upstream_fetch_failed",
                    product_code=product_code,
                    error=repr(result),
                )
                raise UpstreamFetchError(
                    f"Exchange call for {product_code} failed: {result!r}"
                ) from result
            # CancelledError and other non-Exception signals propagate untouched.
            if isinstance(result, BaseException):
                raise result

        logger.debug(
            "snapshot_fetched",
            product_code=product_code,
            ticker_product_code=ticker.product_code,
            timestamp=ticker.timestamp,
            current_funding_rate=funding.current_funding_rate,
        )

        store_settings = self._settings.store
        record_product_code = (
            store_settings.legacy_product_code
            if store_settings.product_code_source == "legacy"
            else product_code
        )
        record = PersistedRecord.merge(record_product_code, ticker, funding)

        try:
            await asyncio.wait_for(
                self._store.upsert_document(
                    store_settings.collection, record.document_key, record.to_fields()
                ),
                store_settings.write_timeout,
            )
        except PersistError as exc:
            logger.error("persist_failed", key=record.document_key, error=exc.message)
            raise
        except asyncio.TimeoutError as exc:
            logger.error(
                "persist_timeout", key=record.document_key, timeout=store_settings.write_timeout
            )
            raise PersistError(
                f"Upsert of {record.document_key} timed out after "
                f"{store_settings.write_timeout}s"
            ) from exc

        logger.info(
            "snapshot_persisted",
            collection=store_settings.collection,
            key=record.document_key,
        )
        return record
