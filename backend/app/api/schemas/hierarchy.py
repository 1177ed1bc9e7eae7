"""Schemas for the goal → project → topic → session hierarchy."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.api.schemas.common import clean_required_text

SessionType = Literal["focus", "break"]


class Goal(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    description: str = ""
    created_at: datetime
    archived: bool = False


class Project(BaseModel):
    id: str
    goal_id: str
    name: str = Field(..., min_length=1)
    description: str = ""
    color: str = ""
    created_at: datetime
    archived: bool = False


class Topic(BaseModel):
    id: str
    # Legacy topics predate projects; the hierarchy repair pass re-homes them.
    project_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1)
    created_at: datetime
    archived: bool = False


class SessionRecord(BaseModel):
    id: str
    type: SessionType
    goal_id: Optional[str] = None
    project_id: Optional[str] = None
    topic_id: Optional[str] = None
    topic_name: Optional[str] = None
    note: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    start_time: datetime
    end_time: datetime
    duration_seconds: int = Field(..., ge=1)
    created_at: datetime


class GoalCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""

    @field_validator("name")
    @classmethod
    def trim_name(cls, value: str) -> str:
        return clean_required_text(value, "name")


class GoalUpdateRequest(GoalCreateRequest):
    archived: Optional[bool] = None


class ProjectCreateRequest(BaseModel):
    goal_id: str
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    color: str = ""

    @field_validator("name")
    @classmethod
    def trim_name(cls, value: str) -> str:
        return clean_required_text(value, "name")


class ProjectUpdateRequest(ProjectCreateRequest):
    archived: Optional[bool] = None


class TopicCreateRequest(BaseModel):
    project_id: str
    name: str = Field(..., min_length=1, max_length=200)
    color: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def trim_name(cls, value: str) -> str:
        return clean_required_text(value, "name")


class TopicUpdateRequest(TopicCreateRequest):
    archived: Optional[bool] = None


class SessionCreateRequest(BaseModel):
    type: SessionType
    goal_id: Optional[str] = None
    project_id: Optional[str] = None
    topic_id: Optional[str] = None
    topic_name: Optional[str] = None
    note: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    start_time: datetime
    end_time: datetime
    duration_seconds: int = Field(..., ge=1)


class SessionUpdateRequest(BaseModel):
    """Partial update; only the fields present in the request body are applied."""

    type: Optional[SessionType] = None
    topic_id: Optional[str] = None
    topic_name: Optional[str] = None
    project_id: Optional[str] = None
    goal_id: Optional[str] = None
    note: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
