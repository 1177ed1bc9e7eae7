"""Metric helpers that report to Opik when it is enabled."""
from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from app.observability.tracing import trace


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record ``value`` as a short-lived ``metric:<name>`` trace."""
    with trace(f"metric:{name}", metadata={"value": value, **(metadata or {})}):
        pass


@contextmanager
def timed_metric(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """
    Always record ``<name>.latency_ms`` for the wrapped block; add
    ``<name>.success`` only when it completes without raising.
    """
    start = perf_counter()
    try:
        yield
    finally:
        log_metric(f"{name}.latency_ms", (perf_counter() - start) * 1000, metadata)
    log_metric(f"{name}.success", 1, metadata)
