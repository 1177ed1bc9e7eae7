"""Domain error types shared by services and routes."""
from __future__ import annotations


class ValidationError(ValueError):
    """A write request is semantically invalid; the write is not applied."""


class SchemaError(ValueError):
    """Persisted or imported data fails basic shape constraints."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class NotFoundError(LookupError):
    """The addressed entity does not exist."""


class ConflictError(RuntimeError):
    """The request conflicts with the current state of related entities."""
