"""FastAPI dependencies for data access."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from app.core.config import settings
from app.db.base import Base
from app.db.session import build_engine, build_session_factory
from app.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

_store: Optional[DocumentStore] = None
_store_lock = Lock()


def build_store(database_url: str | None = None, *, create_schema: bool | None = None) -> DocumentStore:
    """Create a store for ``database_url`` (defaults to the configured database)."""
    engine = build_engine(database_url)
    if settings.auto_create_schema if create_schema is None else create_schema:
        Base.metadata.create_all(bind=engine)
    logger.info("Document store ready (dialect=%s)", engine.dialect.name)
    return DocumentStore(build_session_factory(engine), write_timeout=settings.store_write_timeout_seconds)


def get_store() -> DocumentStore:
    """Return the process-wide document store, creating it on first use."""
    global _store
    with _store_lock:
        if _store is None:
            _store = build_store()
        return _store


def close_store() -> None:
    global _store
    with _store_lock:
        if _store is not None:
            _store.close()
            _store = None
