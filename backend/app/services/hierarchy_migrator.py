"""Referential repair pass over the stored goal/project/topic/session collections."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Sequence, TypeVar

from pydantic import BaseModel

from app.api.schemas.hierarchy import Goal, Project, SessionRecord, Topic
from app.core.config import (
    UNASSIGNED_COLOR,
    UNASSIGNED_GOAL_ID,
    UNASSIGNED_NAME,
    UNASSIGNED_PROJECT_ID,
    UNASSIGNED_TOPIC_ID,
)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class HierarchyData:
    goals: List[Goal] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    topics: List[Topic] = field(default_factory=list)
    sessions: List[SessionRecord] = field(default_factory=list)


@dataclass
class MigrationReport:
    placeholders_created: int = 0
    placeholders_restored: int = 0
    legacy_placeholders_adopted: int = 0
    projects_rebound: int = 0
    topics_rebound: int = 0
    sessions_rebound: int = 0
    sessions_rederived: int = 0

    @property
    def changed(self) -> bool:
        return any(self.as_dict().values())

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class MigrationResult:
    data: HierarchyData
    report: MigrationReport


def migrate_hierarchy(data: HierarchyData, *, now: datetime) -> MigrationResult:
    """
    Return a referentially consistent copy of ``data``.

    Repairs run top-down so every level is rebound against an already repaired
    parent level:

    1. ensure the Unassigned goal exists and is active;
    2. projects pointing at unknown goals move under it;
    3. ensure the Unassigned project exists, active, under the Unassigned goal;
    4. topics pointing at unknown (or no) projects move under it;
    5. ensure the Unassigned topic exists, active, under the Unassigned project;
    6. sessions with an unknown topic (or a focus session without one) move to
       the Unassigned topic, and every session's topic name, project and goal
       are re-derived from its topic. Sessions without a topic lose project/goal.

    The input is never mutated, the pass never fails, and running it on its own
    output changes nothing. ``now`` stamps placeholders that have to be created.
    """
    report = MigrationReport()

    goals = _ensure_placeholder(
        list(data.goals),
        UNASSIGNED_GOAL_ID,
        is_legacy=lambda goal: goal.name == UNASSIGNED_NAME,
        create=lambda: Goal(id=UNASSIGNED_GOAL_ID, name=UNASSIGNED_NAME, created_at=now),
        required={"archived": False},
        report=report,
    )
    goal_ids = {goal.id for goal in goals}

    projects = []
    for project in data.projects:
        if project.goal_id not in goal_ids:
            project = project.model_copy(update={"goal_id": UNASSIGNED_GOAL_ID})
            report.projects_rebound += 1
        projects.append(project)
    projects = _ensure_placeholder(
        projects,
        UNASSIGNED_PROJECT_ID,
        is_legacy=lambda project: project.name == UNASSIGNED_NAME and project.goal_id == UNASSIGNED_GOAL_ID,
        create=lambda: Project(
            id=UNASSIGNED_PROJECT_ID,
            goal_id=UNASSIGNED_GOAL_ID,
            name=UNASSIGNED_NAME,
            color=UNASSIGNED_COLOR,
            created_at=now,
        ),
        required={"archived": False, "goal_id": UNASSIGNED_GOAL_ID},
        report=report,
    )
    projects_by_id = {project.id: project for project in projects}

    topics = []
    for topic in data.topics:
        if topic.project_id not in projects_by_id:
            topic = topic.model_copy(update={"project_id": UNASSIGNED_PROJECT_ID})
            report.topics_rebound += 1
        topics.append(topic)
    topics = _ensure_placeholder(
        topics,
        UNASSIGNED_TOPIC_ID,
        is_legacy=lambda topic: topic.name == UNASSIGNED_NAME and topic.project_id == UNASSIGNED_PROJECT_ID,
        create=lambda: Topic(
            id=UNASSIGNED_TOPIC_ID,
            project_id=UNASSIGNED_PROJECT_ID,
            name=UNASSIGNED_NAME,
            color=UNASSIGNED_COLOR,
            created_at=now,
        ),
        required={"archived": False, "project_id": UNASSIGNED_PROJECT_ID},
        report=report,
    )
    topics_by_id = {topic.id: topic for topic in topics}

    sessions = [_rebind_session(session, topics_by_id, projects_by_id, report) for session in data.sessions]

    return MigrationResult(
        data=HierarchyData(goals=goals, projects=projects, topics=topics, sessions=sessions),
        report=report,
    )


def _ensure_placeholder(
    items: List[M],
    placeholder_id: str,
    *,
    is_legacy: Callable[[M], bool],
    create: Callable[[], M],
    required: Dict[str, object],
    report: MigrationReport,
) -> List[M]:
    index = _find_index(items, lambda item: item.id == placeholder_id)
    legacy = False
    if index is None:
        # Older data identified placeholders by name only; adopt it under the well-known id.
        index = _find_index(items, is_legacy)
        legacy = index is not None
    if index is None:
        report.placeholders_created += 1
        return [*items, create()]

    current = items[index]
    expected = {**required, "id": placeholder_id}
    fixes = {name: value for name, value in expected.items() if getattr(current, name) != value}
    if not fixes:
        return items
    if legacy:
        report.legacy_placeholders_adopted += 1
    else:
        report.placeholders_restored += 1
    updated = list(items)
    updated[index] = current.model_copy(update=fixes)
    return updated


def _rebind_session(
    session: SessionRecord,
    topics_by_id: Dict[str, Topic],
    projects_by_id: Dict[str, Project],
    report: MigrationReport,
) -> SessionRecord:
    topic_id = session.topic_id or None
    rebound = False
    if (topic_id is None and session.type == "focus") or (topic_id is not None and topic_id not in topics_by_id):
        topic_id = UNASSIGNED_TOPIC_ID
        rebound = True

    if topic_id is None:
        expected = {"topic_id": None, "project_id": None, "goal_id": None}
    else:
        topic = topics_by_id[topic_id]
        project = projects_by_id[topic.project_id]
        expected = {
            "topic_id": topic.id,
            "topic_name": topic.name,
            "project_id": project.id,
            "goal_id": project.goal_id,
        }

    fixes = {name: value for name, value in expected.items() if getattr(session, name) != value}
    if not fixes:
        return session
    if rebound:
        report.sessions_rebound += 1
    else:
        report.sessions_rederived += 1
    return session.model_copy(update=fixes)


def _find_index(items: Sequence[M], predicate: Callable[[M], bool]) -> int | None:
    for index, item in enumerate(items):
        if predicate(item):
            return index
    return None
