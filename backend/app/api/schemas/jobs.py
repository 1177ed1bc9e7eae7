"""Schemas for job operations endpoints."""
from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, Field


class JobRunRequest(BaseModel):
    job: Literal["hierarchy_repair"] = "hierarchy_repair"


class JobRunResponse(BaseModel):
    job: str
    changed: bool
    repairs: Dict[str, int] = Field(default_factory=dict)
    request_id: str
