from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.api.schemas.hierarchy import Project, Topic
from app.core.errors import ValidationError
from app.services.session_hierarchy import HierarchyRequest, resolve_session_hierarchy

CREATED = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture()
def hierarchy():
    projects = [
        Project(id="P1", goal_id="G1", name="Project 1", created_at=CREATED),
        Project(id="P2", goal_id="G1", name="Old project", created_at=CREATED, archived=True),
    ]
    topics = [
        Topic(id="T1", project_id="P1", name="Topic 1", color="#22c55e", created_at=CREATED),
        Topic(id="T2", project_id="P2", name="Orphaned", color="#22c55e", created_at=CREATED),
        Topic(id="T3", project_id="P1", name="Retired", color="#22c55e", created_at=CREATED, archived=True),
        Topic(id="T4", project_id=None, name="Legacy", color="#22c55e", created_at=CREATED),
    ]
    return topics, projects


def test_topic_ancestry_overrides_client_ids(hierarchy) -> None:
    topics, projects = hierarchy

    resolved = resolve_session_hierarchy(
        HierarchyRequest(type="focus", topic_id="T1", project_id="WRONG", goal_id="WRONG"),
        topics,
        projects,
    )

    assert resolved.topic_id == "T1"
    assert resolved.topic_name == "Topic 1"
    assert resolved.project_id == "P1"
    assert resolved.goal_id == "G1"


def test_accepts_prebuilt_indexes(hierarchy) -> None:
    topics, projects = hierarchy

    resolved = resolve_session_hierarchy(
        HierarchyRequest(type="focus", topic_id="T1"),
        {topic.id: topic for topic in topics},
        {project.id: project for project in projects},
    )

    assert (resolved.project_id, resolved.goal_id) == ("P1", "G1")


def test_focus_without_topic_is_rejected(hierarchy) -> None:
    with pytest.raises(ValidationError, match="require topicId"):
        resolve_session_hierarchy(HierarchyRequest(type="focus", topic_id=None), *hierarchy)


@pytest.mark.parametrize("topic_id", ["missing", "T3"])
def test_unknown_or_archived_topic_is_rejected(hierarchy, topic_id) -> None:
    with pytest.raises(ValidationError, match="topicId does not exist"):
        resolve_session_hierarchy(HierarchyRequest(type="focus", topic_id=topic_id), *hierarchy)


@pytest.mark.parametrize("topic_id", ["T2", "T4"])
def test_topic_without_live_project_is_rejected(hierarchy, topic_id) -> None:
    with pytest.raises(ValidationError, match="topic project does not exist"):
        resolve_session_hierarchy(HierarchyRequest(type="break", topic_id=topic_id), *hierarchy)


def test_break_without_topic_has_no_ancestry(hierarchy) -> None:
    resolved = resolve_session_hierarchy(
        HierarchyRequest(type="break", project_id="P1", goal_id="G1", topic_name="Coffee"),
        *hierarchy,
    )

    assert resolved.as_update() == {
        "topic_id": None,
        "topic_name": "Coffee",
        "project_id": None,
        "goal_id": None,
    }


def test_break_with_topic_is_attached(hierarchy) -> None:
    resolved = resolve_session_hierarchy(HierarchyRequest(type="break", topic_id="T1"), *hierarchy)

    assert resolved.goal_id == "G1"
