"""Schemas for bulk import and export."""
from __future__ import annotations

from datetime import date
from typing import Dict, List

from pydantic import BaseModel, Field, model_validator

from app.api.schemas.common import check_unique_ids
from app.api.schemas.hierarchy import Goal, Project, SessionRecord, Topic
from app.api.schemas.planner import PlannerDay, RecurringTask, TimeBlockingTemplate
from app.api.schemas.settings import TimerSettings


class ExportPayload(BaseModel):
    settings: TimerSettings
    goals: List[Goal] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    topics: List[Topic]
    sessions: List[SessionRecord]
    planner: Dict[date, PlannerDay] = Field(default_factory=dict)
    recurring: List[RecurringTask] = Field(default_factory=list)
    templates: List[TimeBlockingTemplate] = Field(default_factory=list)

    @model_validator(mode="after")
    def ids_unique_per_collection(self) -> "ExportPayload":
        check_unique_ids(self.goals, "goal")
        check_unique_ids(self.projects, "project")
        check_unique_ids(self.topics, "topic")
        check_unique_ids(self.sessions, "session")
        check_unique_ids(self.recurring, "recurring task")
        check_unique_ids(self.templates, "template")
        return self


class ImportResponse(ExportPayload):
    repairs: Dict[str, int] = Field(default_factory=dict)
    request_id: str = ""
