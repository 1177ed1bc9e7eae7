"""Typed loading and dumping of the documents that make up the data set."""
from __future__ import annotations

from datetime import date
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.api.schemas.common import duplicate_ids
from app.api.schemas.hierarchy import Goal, Project, SessionRecord, Topic
from app.api.schemas.planner import PlannerDay, RecurringTask, TimeBlockingTemplate
from app.api.schemas.settings import TimerSettings
from app.core.errors import SchemaError
from app.services.hierarchy_migrator import HierarchyData

M = TypeVar("M", bound=BaseModel)

SETTINGS_KEY = "settings"
PLANNER_PREFIX = "planner:"


class Collection(Generic[M]):
    """A list of entities stored as one JSON array document."""

    def __init__(self, key: str, model: Type[M]) -> None:
        self.key = key
        self.model = model
        self._adapter = TypeAdapter(List[model])

    def load(self, payload: Any) -> List[M]:
        if payload is None:
            return []
        try:
            items = self._adapter.validate_python(payload)
        except PydanticValidationError as exc:
            raise SchemaError(
                f"Stored document '{self.key}' failed validation ({exc.error_count()} errors)",
                key=self.key,
            ) from exc
        duplicates = duplicate_ids(items)
        if duplicates:
            raise SchemaError(f"Stored document '{self.key}' repeats ids: {', '.join(duplicates)}", key=self.key)
        return items

    def load_from(self, documents: Mapping[str, Any]) -> List[M]:
        return self.load(documents.get(self.key))

    def dump(self, items: List[M]) -> List[dict]:
        return [item.model_dump(mode="json") for item in items]

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Collection({self.key!r}, {self.model.__name__})"


GOALS = Collection("goals", Goal)
PROJECTS = Collection("projects", Project)
TOPICS = Collection("topics", Topic)
SESSIONS = Collection("sessions", SessionRecord)
RECURRING = Collection("recurring", RecurringTask)
TEMPLATES = Collection("templates", TimeBlockingTemplate)

HIERARCHY_KEYS = (GOALS.key, PROJECTS.key, TOPICS.key, SESSIONS.key)


def load_settings(payload: Any) -> TimerSettings:
    if payload is None:
        return TimerSettings()
    try:
        return TimerSettings.model_validate(payload)
    except PydanticValidationError as exc:
        raise SchemaError("Stored document 'settings' failed validation", key=SETTINGS_KEY) from exc


def planner_key(day: date) -> str:
    return f"{PLANNER_PREFIX}{day.isoformat()}"


def planner_date(key: str) -> date:
    return date.fromisoformat(key[len(PLANNER_PREFIX):])


def load_planner_day(payload: Any, key: Optional[str] = None) -> PlannerDay:
    if payload is None:
        return PlannerDay()
    try:
        return PlannerDay.model_validate(payload)
    except PydanticValidationError as exc:
        raise SchemaError(f"Stored document '{key or 'planner'}' failed validation", key=key) from exc


def load_hierarchy(documents: Mapping[str, Any]) -> HierarchyData:
    return HierarchyData(
        goals=GOALS.load_from(documents),
        projects=PROJECTS.load_from(documents),
        topics=TOPICS.load_from(documents),
        sessions=SESSIONS.load_from(documents),
    )


def dump_hierarchy(data: HierarchyData) -> dict[str, List[dict]]:
    return {
        GOALS.key: GOALS.dump(data.goals),
        PROJECTS.key: PROJECTS.dump(data.projects),
        TOPICS.key: TOPICS.dump(data.topics),
        SESSIONS.key: SESSIONS.dump(data.sessions),
    }
