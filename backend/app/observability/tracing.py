"""Request-scoped Opik traces."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from app.core.context import get_request_id
from app.observability.client import get_opik_client

logger = logging.getLogger(__name__)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional[Any]]:
    """
    Open an Opik trace around a block of work.

    ``request_id`` defaults to the id bound to the current request context.
    Exceptions raised inside the block are attached to the trace and then
    re-raised unchanged. Without an Opik client the context yields ``None``.
    """
    client = get_opik_client()
    opik_trace = None
    if client is not None:
        trace_metadata = dict(metadata or {})
        rid = request_id or get_request_id()
        if rid:
            trace_metadata.setdefault("request_id", rid)
        try:
            opik_trace = client.trace(name=name, metadata=trace_metadata or None)
        except Exception as exc:  # pragma: no cover - exporter failure
            logger.debug("Unable to start Opik trace %s: %s", name, exc)

    try:
        yield opik_trace
    except Exception as exc:
        if opik_trace is not None:
            try:
                opik_trace.update(error_info={"exception_type": type(exc).__name__, "message": str(exc)})
            except Exception:  # pragma: no cover
                logger.debug("Failed to attach error info to trace %s", name, exc_info=True)
        raise
    finally:
        if opik_trace is not None:
            try:
                opik_trace.end()
            except Exception:  # pragma: no cover
                logger.debug("Failed to close trace %s", name, exc_info=True)
