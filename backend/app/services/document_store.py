"""Serialized JSON document store backed by the ``documents`` table."""
from __future__ import annotations

import contextvars
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.attributes import flag_modified

from app.db.models.document import Document

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DocumentTransaction:
    """Read/write view of the store handed to a queued write action."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self.written: List[str] = []
        self.deleted: List[str] = []

    def get(self, key: str, default: Any = None) -> Any:
        row = self._db.get(Document, key)
        return row.payload if row is not None else default

    def has(self, key: str) -> bool:
        return self._db.get(Document, key) is not None

    def keys(self, prefix: str = "") -> List[str]:
        stmt = select(Document.key).order_by(Document.key)
        if prefix:
            stmt = stmt.where(Document.key.startswith(prefix, autoescape=True))
        return list(self._db.scalars(stmt))

    def put(self, key: str, payload: Any) -> None:
        """Replace the whole document stored under ``key``."""
        row = self._db.get(Document, key)
        if row is None:
            self._db.add(Document(key=key, payload=payload))
        else:
            row.payload = payload
            flag_modified(row, "payload")
        self._db.flush()
        self.written.append(key)

    def delete(self, key: str) -> bool:
        result = self._db.execute(delete(Document).where(Document.key == key))
        removed = bool(result.rowcount)
        if removed:
            self.deleted.append(key)
        return removed


class DocumentStore:
    """
    Key/value store of whole JSON documents.

    Reads are snapshot reads: every key requested together comes from one
    query, so a reader sees a write either entirely or not at all. Writes are
    actions queued on a single worker thread and applied one at a time in
    submission order, each inside its own transaction. A failing action is
    rolled back and re-raised to its submitter; later actions still run.
    """

    def __init__(self, session_factory: sessionmaker, *, write_timeout: Optional[float] = None) -> None:
        self._session_factory = session_factory
        self._write_timeout = write_timeout
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="document-writer")

    def snapshot(self, keys: Iterable[str]) -> Dict[str, Any]:
        wanted = list(dict.fromkeys(keys))
        if not wanted:
            return {}
        with self._session_factory() as db:
            rows = db.execute(select(Document.key, Document.payload).where(Document.key.in_(wanted))).all()
        return {key: payload for key, payload in rows}

    def snapshot_prefix(self, prefix: str) -> Dict[str, Any]:
        with self._session_factory() as db:
            rows = db.execute(
                select(Document.key, Document.payload)
                .where(Document.key.startswith(prefix, autoescape=True))
                .order_by(Document.key)
            ).all()
        return {key: payload for key, payload in rows}

    def read(self, key: str, default: Any = None) -> Any:
        return self.snapshot([key]).get(key, default)

    def submit(self, action: Callable[[DocumentTransaction], T]) -> "Future[T]":
        """Queue ``action`` behind every write submitted before it."""
        context = contextvars.copy_context()
        return self._writer.submit(context.run, self._apply, action)

    def write(self, action: Callable[[DocumentTransaction], T]) -> T:
        """Queue ``action`` and wait for its result."""
        return self.submit(action).result(timeout=self._write_timeout)

    def close(self) -> None:
        self._writer.shutdown(wait=True)

    def _apply(self, action: Callable[[DocumentTransaction], T]) -> T:
        with self._session_factory() as db:
            tx = DocumentTransaction(db)
            try:
                result = action(tx)
                db.commit()
            except Exception:
                db.rollback()
                logger.warning("Document write %s failed and was rolled back", _action_name(action), exc_info=True)
                raise
        logger.debug(
            "Document write %s committed (written=%s deleted=%s)",
            _action_name(action),
            tx.written,
            tx.deleted,
        )
        return result


def _action_name(action: Callable[..., Any]) -> str:
    return getattr(action, "__qualname__", None) or repr(action)
