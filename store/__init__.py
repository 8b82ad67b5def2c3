"""
Store module initialization.

Provides the VideoStore capability interface and its relational (SQLAlchemy)
and document (MongoDB) backends.
"""

from config import Config
from store.base import (
    DuplicateInteractionError,
    InteractionType,
    NewMetaItem,
    RecordNotFoundError,
    StoreError,
    VideoStore,
)


def build_store(cfg: Config) -> VideoStore:
    """
    Construct the backend selected by ``cfg.storage.backend``.

    Backend modules are imported lazily so a deployment only needs the
    driver it actually uses.
    """
    backend = cfg.storage.backend
    if backend == "sql":
        from store.sql_store import SqlVideoStore

        return SqlVideoStore.from_url(cfg.postgres.url, echo=cfg.postgres.echo)
    if backend == "mongo":
        from store.mongo_store import MongoVideoStore

        return MongoVideoStore.from_url(
            cfg.mongo.url, cfg.mongo.database, timeout_ms=cfg.mongo.timeout_ms)
    raise ValueError(f"Unsupported storage backend: {backend!r}")


__all__ = [
    "build_store",
    "DuplicateInteractionError",
    "InteractionType",
    "NewMetaItem",
    "RecordNotFoundError",
    "StoreError",
    "VideoStore",
]
