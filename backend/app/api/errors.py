"""Translate service-layer errors into HTTP responses."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status

from app.core.errors import ConflictError, NotFoundError, SchemaError, ValidationError

logger = logging.getLogger(__name__)


@contextmanager
def domain_errors() -> Iterator[None]:
    try:
        yield
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SchemaError as exc:
        # Stored data no longer validates; this is a server-side fault.
        logger.error("Corrupt stored document %s: %s", exc.key, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Stored data is corrupted ({exc.key or 'unknown document'})",
        ) from exc
