"""Abstract document store interface.

A document is a flat-or-nested field mapping addressed by (collection, key).
``upsert_document`` is create-or-replace: writing the same key twice leaves
one document holding the second write's fields.
"""

from abc import ABC, abstractmethod
from typing import Any


class DocumentStore(ABC):
    """Abstract base class for snapshot document stores.

    Implementations raise ``PersistError`` for every backend failure.
    """

    async def connect(self) -> None:
        """Open connections or create schema. Default: nothing to do."""

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        ...

    @abstractmethod
    async def upsert_document(
        self, collection: str, key: str, fields: dict[str, Any]
    ) -> None:
        """Create or fully replace the document ``key`` in ``collection``."""
        ...

    @abstractmethod
    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        """Return the stored fields, or None if the document does not exist."""
        ...

    @abstractmethod
    async def count_documents(self, collection: str) -> int:
        """Return the number of documents in ``collection``."""
        ...
