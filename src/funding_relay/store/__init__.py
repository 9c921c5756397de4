"""Snapshot persistence layer -- Cloud Firestore or local SQLite."""

from funding_relay.config import AppSettings
from funding_relay.store.base import DocumentStore
from funding_relay.store.sqlite_store import SqliteDocumentStore


def create_store(settings: AppSettings) -> DocumentStore:
    """Build the configured document store backend.

    The Firestore project falls back to the shared PROJECT_ID, as both
    roles were one value in the first deployments.
    """
    if settings.store.backend == "sqlite":
        return SqliteDocumentStore(settings.store.sqlite_path)

    from funding_relay.store.firestore_store import FirestoreDocumentStore

    project = settings.store.firestore_project or settings.project_id.get_secret_value()
    return FirestoreDocumentStore(project=project)


__all__ = ["DocumentStore", "SqliteDocumentStore", "create_store"]
