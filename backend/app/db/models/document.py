"""Document ORM model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, func

from app.db.base import Base
from app.db.types import JSONDocument


class Document(Base):
    """One whole JSON document (a collection or a planner day) addressed by key."""

    __tablename__ = "documents"

    key = Column(String(length=64), primary_key=True)
    payload = Column(JSONDocument, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
