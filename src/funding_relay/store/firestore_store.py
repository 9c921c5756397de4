"""Cloud Firestore document store.

``DocumentReference.set`` without merge replaces the whole document, which
gives the create-or-replace semantics snapshots rely on.
"""

from typing import Any

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore

from funding_relay.exceptions import PersistError
from funding_relay.logging import get_logger
from funding_relay.store.base import DocumentStore

logger = get_logger(__name__)


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by a shared ``firestore.AsyncClient``.

    Args:
        project: GCP project id. Ignored when ``client`` is given.
        client: Pre-built async client, mainly for tests.
    """

    def __init__(
        self, project: str = "", client: firestore.AsyncClient | None = None
    ) -> None:
        self._project = project
        self._client = client or firestore.AsyncClient(project=project or None)

    async def connect(self) -> None:
        logger.info("firestore_store_ready", project=self._project or "<default>")

    async def close(self) -> None:
        # The client's gRPC channel is not closed here; it goes away with the process.
        logger.info("firestore_store_closed")

    async def upsert_document(
        self, collection: str, key: str, fields: dict[str, Any]
    ) -> None:
        try:
            await self._client.collection(collection).document(key).set(fields)
        except gcp_exceptions.GoogleAPIError as exc:
            raise PersistError(
                f"Firestore set of {collection}/{key} failed: {exc}"
            ) from exc
        logger.debug("firestore_document_upserted", collection=collection, key=key)

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        try:
            snapshot = await self._client.collection(collection).document(key).get()
        except gcp_exceptions.GoogleAPIError as exc:
            raise PersistError(
                f"Firestore get of {collection}/{key} failed: {exc}"
            ) from exc
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    async def count_documents(self, collection: str) -> int:
        try:
            results = await self._client.collection(collection).count().get()
        except gcp_exceptions.GoogleAPIError as exc:
            raise PersistError(f"Firestore count of {collection} failed: {exc}") from exc
        # One aggregation query, one count alias: [[AggregationResult]]
        return int(results[0][0].value)
