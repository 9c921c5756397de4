"""Async SQLite document store for running the relay without cloud credentials.

Uses aiosqlite for non-blocking database operations with WAL mode. Each
document is one row keyed by (collection, doc_key); fields are stored as a
JSON object, so datetimes come back as ISO-8601 strings on read.
"""

import json
import os
from datetime import datetime, timezone
from typing import Any, Self

import aiosqlite

from funding_relay.exceptions import PersistError
from funding_relay.logging import get_logger
from funding_relay.store.base import DocumentStore

logger = get_logger(__name__)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    doc_key TEXT NOT NULL,
    fields TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (collection, doc_key)
);
"""

_UPSERT_SQL = """
INSERT INTO documents (collection, doc_key, fields, updated_at)
VALUES (?, ?, ?, ?)
ON CONFLICT (collection, doc_key) DO UPDATE SET
    fields = excluded.fields,
    updated_at = excluded.updated_at
"""


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class SqliteDocumentStore(DocumentStore):
    """Document store backed by a single SQLite file.

    Usage:
        async with SqliteDocumentStore("data/snapshots.db") as store:
            await store.upsert_document("funding_rate", key, fields)
    """

    def __init__(self, db_path: str = "data/snapshots.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """Access the raw aiosqlite connection.

        Raises RuntimeError if not connected.
        """
        if self._connection is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        """Open the connection and create the documents table.

        Creates the parent directory if it does not exist.
        """
        db_dir = os.path.dirname(self._db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA journal_mode=WAL")
        await self._connection.execute("PRAGMA synchronous=NORMAL")
        await self._connection.executescript(_CREATE_TABLES_SQL)
        await self._connection.commit()

        logger.info("sqlite_store_connected", db_path=self._db_path)

    async def close(self) -> None:
        """Close the database connection if open."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("sqlite_store_closed", db_path=self._db_path)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def upsert_document(
        self, collection: str, key: str, fields: dict[str, Any]
    ) -> None:
        try:
            encoded = json.dumps(fields, default=_json_default)
        except (TypeError, ValueError) as exc:
            raise PersistError(f"Cannot encode document {collection}/{key}: {exc}") from exc

        now = datetime.now(timezone.utc).isoformat()
        try:
            await self.db.execute(_UPSERT_SQL, (collection, key, encoded, now))
            await self.db.commit()
        except aiosqlite.Error as exc:
            raise PersistError(f"SQLite upsert of {collection}/{key} failed: {exc}") from exc

        logger.debug("sqlite_document_upserted", collection=collection, key=key)

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        try:
            cursor = await self.db.execute(
                "SELECT fields FROM documents WHERE collection = ? AND doc_key = ?",
                (collection, key),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise PersistError(f"SQLite read of {collection}/{key} failed: {exc}") from exc
        if row is None:
            return None
        return json.loads(row[0])

    async def count_documents(self, collection: str) -> int:
        try:
            cursor = await self.db.execute(
                "SELECT COUNT(*) FROM documents WHERE collection = ?", (collection,)
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise PersistError(f"SQLite count of {collection} failed: {exc}") from exc
        return int(row[0]) if row else 0
