"""Database layer: declarative base and the documents model."""

from app.db.base import Base
from app.db import models  # noqa: F401  (registers models on Base.metadata)

__all__ = ["Base"]
