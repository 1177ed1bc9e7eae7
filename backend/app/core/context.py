"""Per-request context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


@contextmanager
def request_context(request_id: str | None) -> Iterator[None]:
    """Bind ``request_id`` for the duration of the block."""
    token = request_id_ctx_var.set(request_id)
    try:
        yield
    finally:
        request_id_ctx_var.reset(token)
