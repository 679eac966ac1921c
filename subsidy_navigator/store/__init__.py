"""Document store backends and their explicit initialisation."""

from __future__ import annotations

from pathlib import Path

from ..config import StoreBackend, StoreConfig
from ..infra import SQLiteManager
from ..logging_conf import configure_logging
from .base import DocumentStore
from .mongo_store import MongoDocumentStore
from .sqlite_store import SQLiteDocumentStore


def initialize_store(
    config: StoreConfig,
    base_dir: Path,
    sqlite_manager: SQLiteManager | None = None,
) -> DocumentStore:
    """Build the configured store once at process start.

    Nothing in this package connects at import time; callers own the
    returned handle and close it on shutdown.
    """

    logger = configure_logging().bind(component="store")
    if config.backend is StoreBackend.MONGODB:
        uri = config.resolved_uri()
        logger.info(
            "store_initialised",
            backend=config.backend.value,
            emulator=config.use_emulator,
            database=config.database,
        )
        return MongoDocumentStore(uri, database=config.database)
    if config.backend is StoreBackend.SQLITE:
        path = config.resolved_sqlite_path(base_dir)
        logger.info("store_initialised", backend=config.backend.value, path=str(path))
        return SQLiteDocumentStore(sqlite_manager or SQLiteManager(), path)
    raise ValueError(f"Unsupported store backend: {config.backend}")


__all__ = [
    "DocumentStore",
    "MongoDocumentStore",
    "SQLiteDocumentStore",
    "initialize_store",
]
