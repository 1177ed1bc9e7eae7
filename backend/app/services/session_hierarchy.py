"""Derive the authoritative topic/project/goal triple for a session write."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Mapping, Optional

from app.api.schemas.hierarchy import Project, SessionType, Topic
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HierarchyRequest:
    type: SessionType
    topic_id: Optional[str] = None
    project_id: Optional[str] = None
    goal_id: Optional[str] = None
    topic_name: Optional[str] = None


@dataclass(frozen=True)
class ResolvedHierarchy:
    topic_id: Optional[str]
    topic_name: Optional[str]
    project_id: Optional[str]
    goal_id: Optional[str]

    def as_update(self) -> Dict[str, Optional[str]]:
        return asdict(self)


def index_by_id(items: Iterable) -> Dict[str, object]:
    return {item.id: item for item in items}


def resolve_session_hierarchy(
    request: HierarchyRequest,
    topics: Iterable[Topic] | Mapping[str, Topic],
    projects: Iterable[Project] | Mapping[str, Project],
) -> ResolvedHierarchy:
    """
    Resolve the hierarchy fields a session may be persisted with.

    The topic is authoritative: project and goal are always taken from the
    topic's live ancestry. Client-supplied project/goal ids that disagree are
    ignored (and logged), never persisted. A session without a topic is never
    attached to a project or goal.
    """
    if request.type == "focus" and not request.topic_id:
        raise ValidationError("Focus sessions require topicId")

    if not request.topic_id:
        return ResolvedHierarchy(topic_id=None, topic_name=request.topic_name, project_id=None, goal_id=None)

    topics_by_id = topics if isinstance(topics, Mapping) else index_by_id(topics)
    projects_by_id = projects if isinstance(projects, Mapping) else index_by_id(projects)

    topic = topics_by_id.get(request.topic_id)
    if topic is None or topic.archived:
        raise ValidationError("topicId does not exist")

    project = projects_by_id.get(topic.project_id) if topic.project_id else None
    if project is None or project.archived:
        raise ValidationError("topic project does not exist")

    if (request.project_id and request.project_id != project.id) or (
        request.goal_id and request.goal_id != project.goal_id
    ):
        logger.info(
            "Ignoring client hierarchy ids for topic %s (project=%s goal=%s, derived project=%s goal=%s)",
            topic.id,
            request.project_id,
            request.goal_id,
            project.id,
            project.goal_id,
        )

    return ResolvedHierarchy(
        topic_id=topic.id,
        topic_name=topic.name,
        project_id=project.id,
        goal_id=project.goal_id,
    )
