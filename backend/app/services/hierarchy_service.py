"""Create, update and archive goals, projects and topics."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence, TypeVar
from uuid import uuid4

from pydantic import BaseModel

from app.api.schemas.hierarchy import (
    Goal,
    GoalCreateRequest,
    GoalUpdateRequest,
    Project,
    ProjectCreateRequest,
    ProjectUpdateRequest,
    Topic,
    TopicCreateRequest,
    TopicUpdateRequest,
)
from app.core.config import PLACEHOLDER_IDS, UNASSIGNED_GOAL_ID, UNASSIGNED_PROJECT_ID, UNASSIGNED_TOPIC_ID
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.services.collections import GOALS, PROJECTS, SESSIONS, TOPICS
from app.services.document_store import DocumentStore, DocumentTransaction

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

def list_goals(store: DocumentStore) -> List[Goal]:
    return GOALS.load(store.read(GOALS.key))


def create_goal(store: DocumentStore, payload: GoalCreateRequest, *, now: datetime) -> Goal:
    goal = Goal(id=f"g_{uuid4()}", name=payload.name, description=payload.description, created_at=now)

    def action(tx: DocumentTransaction) -> Goal:
        goals = GOALS.load(tx.get(GOALS.key))
        tx.put(GOALS.key, GOALS.dump([*goals, goal]))
        return goal

    created = store.write(action)
    logger.info("Goal %s created", created.id)
    return created


def update_goal(store: DocumentStore, goal_id: str, payload: GoalUpdateRequest) -> Goal:
    def action(tx: DocumentTransaction) -> Goal:
        goals = GOALS.load(tx.get(GOALS.key))
        index = _index_or_404(goals, goal_id, "Goal not found")
        if payload.archived and not goals[index].archived:
            _guard_goal_archive(goal_id, PROJECTS.load(tx.get(PROJECTS.key)))
        goals[index] = goals[index].model_copy(update=_changes(payload))
        tx.put(GOALS.key, GOALS.dump(goals))
        return goals[index]

    return store.write(action)


def archive_goal(store: DocumentStore, goal_id: str) -> Goal:
    def action(tx: DocumentTransaction) -> Goal:
        goals = GOALS.load(tx.get(GOALS.key))
        index = _index_or_404(goals, goal_id, "Goal not found")
        _guard_goal_archive(goal_id, PROJECTS.load(tx.get(PROJECTS.key)))
        goals[index] = goals[index].model_copy(update={"archived": True})
        tx.put(GOALS.key, GOALS.dump(goals))
        return goals[index]

    archived = store.write(action)
    logger.info("Goal %s archived", goal_id)
    return archived


def _guard_goal_archive(goal_id: str, projects: Sequence[Project]) -> None:
    _guard_placeholder(goal_id)
    if any(project.goal_id == goal_id and not project.archived for project in projects):
        raise ConflictError("Cannot archive goal with active projects")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def list_projects(store: DocumentStore, *, goal_id: Optional[str] = None) -> List[Project]:
    projects = PROJECTS.load(store.read(PROJECTS.key))
    if goal_id:
        return [project for project in projects if project.goal_id == goal_id]
    return projects


def create_project(store: DocumentStore, payload: ProjectCreateRequest, *, now: datetime) -> Project:
    project = Project(id=f"p_{uuid4()}", created_at=now, **payload.model_dump())

    def action(tx: DocumentTransaction) -> Project:
        _require_active_goal(GOALS.load(tx.get(GOALS.key)), payload.goal_id)
        projects = PROJECTS.load(tx.get(PROJECTS.key))
        tx.put(PROJECTS.key, PROJECTS.dump([*projects, project]))
        return project

    created = store.write(action)
    logger.info("Project %s created under goal %s", created.id, created.goal_id)
    return created


def update_project(store: DocumentStore, project_id: str, payload: ProjectUpdateRequest) -> Project:
    def action(tx: DocumentTransaction) -> Project:
        _require_active_goal(GOALS.load(tx.get(GOALS.key)), payload.goal_id)
        projects = PROJECTS.load(tx.get(PROJECTS.key))
        index = _index_or_404(projects, project_id, "Project not found")
        if project_id == UNASSIGNED_PROJECT_ID and payload.goal_id != UNASSIGNED_GOAL_ID:
            raise ConflictError("The Unassigned project cannot be moved")
        if payload.archived and not projects[index].archived:
            _guard_project_archive(project_id, TOPICS.load(tx.get(TOPICS.key)))
        projects[index] = projects[index].model_copy(update=_changes(payload))
        tx.put(PROJECTS.key, PROJECTS.dump(projects))
        return projects[index]

    return store.write(action)


def archive_project(store: DocumentStore, project_id: str) -> Project:
    def action(tx: DocumentTransaction) -> Project:
        projects = PROJECTS.load(tx.get(PROJECTS.key))
        index = _index_or_404(projects, project_id, "Project not found")
        _guard_project_archive(project_id, TOPICS.load(tx.get(TOPICS.key)))
        projects[index] = projects[index].model_copy(update={"archived": True})
        tx.put(PROJECTS.key, PROJECTS.dump(projects))
        return projects[index]

    archived = store.write(action)
    logger.info("Project %s archived", project_id)
    return archived


def _require_active_goal(goals: Sequence[Goal], goal_id: str) -> None:
    if not any(goal.id == goal_id and not goal.archived for goal in goals):
        raise ValidationError("goalId does not exist")


def _guard_project_archive(project_id: str, topics: Sequence[Topic]) -> None:
    _guard_placeholder(project_id)
    if any(topic.project_id == project_id and not topic.archived for topic in topics):
        raise ConflictError("Cannot archive project with active topics")


# ---------------------------------------------------------------------------
# Topics
# ---------------------------------------------------------------------------

def list_topics(
    store: DocumentStore,
    *,
    project_id: Optional[str] = None,
    goal_id: Optional[str] = None,
) -> List[Topic]:
    documents = store.snapshot([TOPICS.key, PROJECTS.key])
    topics = TOPICS.load_from(documents)
    if project_id:
        topics = [topic for topic in topics if topic.project_id == project_id]
    if goal_id:
        scoped = {project.id for project in PROJECTS.load_from(documents) if project.goal_id == goal_id}
        topics = [topic for topic in topics if topic.project_id in scoped]
    return topics


def create_topic(store: DocumentStore, payload: TopicCreateRequest, *, now: datetime) -> Topic:
    topic = Topic(id=f"t_{uuid4()}", created_at=now, **payload.model_dump())

    def action(tx: DocumentTransaction) -> Topic:
        _require_active_project(PROJECTS.load(tx.get(PROJECTS.key)), payload.project_id)
        topics = TOPICS.load(tx.get(TOPICS.key))
        tx.put(TOPICS.key, TOPICS.dump([*topics, topic]))
        return topic

    created = store.write(action)
    logger.info("Topic %s created under project %s", created.id, created.project_id)
    return created


def update_topic(store: DocumentStore, topic_id: str, payload: TopicUpdateRequest) -> Topic:
    def action(tx: DocumentTransaction) -> Topic:
        _require_active_project(PROJECTS.load(tx.get(PROJECTS.key)), payload.project_id)
        topics = TOPICS.load(tx.get(TOPICS.key))
        index = _index_or_404(topics, topic_id, "Topic not found")
        if topic_id == UNASSIGNED_TOPIC_ID and payload.project_id != UNASSIGNED_PROJECT_ID:
            raise ConflictError("The Unassigned topic cannot be moved")
        if payload.archived and not topics[index].archived:
            _guard_topic_archive(topic_id, tx)
        topics[index] = topics[index].model_copy(update=_changes(payload))
        tx.put(TOPICS.key, TOPICS.dump(topics))
        return topics[index]

    return store.write(action)


def archive_topic(store: DocumentStore, topic_id: str) -> Topic:
    def action(tx: DocumentTransaction) -> Topic:
        topics = TOPICS.load(tx.get(TOPICS.key))
        index = _index_or_404(topics, topic_id, "Topic not found")
        _guard_topic_archive(topic_id, tx)
        topics[index] = topics[index].model_copy(update={"archived": True})
        tx.put(TOPICS.key, TOPICS.dump(topics))
        return topics[index]

    archived = store.write(action)
    logger.info("Topic %s archived", topic_id)
    return archived


def _require_active_project(projects: Sequence[Project], project_id: str) -> None:
    if not any(project.id == project_id and not project.archived for project in projects):
        raise ValidationError("projectId does not exist")


def _guard_topic_archive(topic_id: str, tx: DocumentTransaction) -> None:
    _guard_placeholder(topic_id)
    if any(session.topic_id == topic_id for session in SESSIONS.load(tx.get(SESSIONS.key))):
        raise ConflictError("Cannot archive topic with existing sessions")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _guard_placeholder(entity_id: str) -> None:
    if entity_id in PLACEHOLDER_IDS:
        raise ConflictError("Cannot archive the Unassigned placeholder")


def _index_or_404(items: Sequence[M], entity_id: str, message: str) -> int:
    for index, item in enumerate(items):
        if item.id == entity_id:
            return index
    raise NotFoundError(message)


def _changes(payload: BaseModel) -> dict:
    """Fields the client actually sent, minus explicit nulls."""
    return payload.model_dump(exclude_unset=True, exclude_none=True)
