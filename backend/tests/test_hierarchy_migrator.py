from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from app.api.schemas.hierarchy import Goal, Project, SessionRecord, Topic
from app.core.config import UNASSIGNED_GOAL_ID, UNASSIGNED_PROJECT_ID, UNASSIGNED_TOPIC_ID
from app.services.hierarchy_migrator import HierarchyData, migrate_hierarchy

NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
CREATED = datetime(2025, 12, 1, tzinfo=timezone.utc)


def _session(session_id: str, *, type: str = "focus", topic_id=None, **extra) -> SessionRecord:
    start = CREATED + timedelta(hours=1)
    return SessionRecord(
        id=session_id,
        type=type,
        topic_id=topic_id,
        start_time=start,
        end_time=start + timedelta(minutes=25),
        duration_seconds=1500,
        created_at=start,
        **extra,
    )


def _assert_consistent(data: HierarchyData) -> None:
    goal_ids = {goal.id for goal in data.goals}
    projects = {project.id: project for project in data.projects}
    topics = {topic.id: topic for topic in data.topics}

    assert {UNASSIGNED_GOAL_ID, UNASSIGNED_PROJECT_ID, UNASSIGNED_TOPIC_ID} <= goal_ids | set(projects) | set(topics)
    assert all(project.goal_id in goal_ids for project in data.projects)
    assert all(topic.project_id in projects for topic in data.topics)
    for session in data.sessions:
        if session.type == "focus":
            assert session.topic_id is not None
        if session.topic_id is None:
            assert session.project_id is None and session.goal_id is None
            continue
        topic = topics[session.topic_id]
        assert session.topic_name == topic.name
        assert session.project_id == topic.project_id
        assert session.goal_id == projects[topic.project_id].goal_id


def test_dangling_references_move_under_placeholders() -> None:
    goal = Goal(id="g1", name="Goal 1", created_at=CREATED)
    project = Project(id="p1", goal_id="missing-goal", name="Project 1", created_at=CREATED)
    topic = Topic(id="t1", project_id="missing-project", name="Topic 1", color="#22c55e", created_at=CREATED)
    data = HierarchyData(goals=[goal], projects=[project], topics=[topic], sessions=[_session("s1")])

    result = migrate_hierarchy(data, now=NOW)

    migrated = result.data
    assert next(p for p in migrated.projects if p.id == "p1").goal_id == UNASSIGNED_GOAL_ID
    assert next(t for t in migrated.topics if t.id == "t1").project_id == UNASSIGNED_PROJECT_ID
    session = migrated.sessions[0]
    assert session.topic_id == UNASSIGNED_TOPIC_ID
    assert session.project_id == UNASSIGNED_PROJECT_ID
    assert session.goal_id == UNASSIGNED_GOAL_ID
    assert result.report.placeholders_created == 3
    assert result.report.projects_rebound == 1
    assert result.report.topics_rebound == 1
    assert result.report.sessions_rebound == 1
    _assert_consistent(migrated)


def test_input_is_not_mutated() -> None:
    project = Project(id="p1", goal_id="missing-goal", name="Project 1", created_at=CREATED)
    data = HierarchyData(projects=[project])

    migrate_hierarchy(data, now=NOW)

    assert data.projects == [project]
    assert project.goal_id == "missing-goal"
    assert data.goals == []


def test_placeholders_are_created_with_now_and_chained() -> None:
    migrated = migrate_hierarchy(HierarchyData(), now=NOW).data

    assert [goal.id for goal in migrated.goals] == [UNASSIGNED_GOAL_ID]
    assert migrated.projects[0].goal_id == UNASSIGNED_GOAL_ID
    assert migrated.topics[0].project_id == UNASSIGNED_PROJECT_ID
    assert migrated.goals[0].created_at == NOW
    assert migrated.topics[0].name == "Unassigned"


def test_archived_or_moved_placeholders_are_restored() -> None:
    data = migrate_hierarchy(HierarchyData(), now=NOW).data
    tampered = HierarchyData(
        goals=[goal.model_copy(update={"archived": True}) for goal in data.goals],
        projects=[project.model_copy(update={"goal_id": "elsewhere"}) for project in data.projects],
        topics=data.topics,
    )

    result = migrate_hierarchy(tampered, now=NOW)

    assert result.data.goals[0].archived is False
    assert result.data.projects[0].goal_id == UNASSIGNED_GOAL_ID
    assert result.report.placeholders_created == 0
    assert result.report.placeholders_restored == 1
    assert result.report.projects_rebound == 1


def test_legacy_placeholders_are_adopted_by_name() -> None:
    data = HierarchyData(
        goals=[Goal(id="g_old", name="Unassigned", created_at=CREATED)],
        projects=[Project(id="p_old", goal_id="g_old", name="Unassigned", created_at=CREATED)],
        topics=[Topic(id="t_old", project_id="p_old", name="Unassigned", color="#64748b", created_at=CREATED)],
        sessions=[_session("s1", topic_id="t_old")],
    )

    result = migrate_hierarchy(data, now=NOW)

    assert [goal.id for goal in result.data.goals] == [UNASSIGNED_GOAL_ID]
    assert [project.id for project in result.data.projects] == [UNASSIGNED_PROJECT_ID]
    assert [topic.id for topic in result.data.topics] == [UNASSIGNED_TOPIC_ID]
    assert result.data.sessions[0].topic_id == UNASSIGNED_TOPIC_ID
    assert result.report.legacy_placeholders_adopted == 3
    assert result.report.placeholders_created == 0
    _assert_consistent(result.data)


def test_stale_session_ancestry_is_rederived() -> None:
    base = migrate_hierarchy(HierarchyData(), now=NOW).data
    goal = Goal(id="g1", name="Goal", created_at=CREATED)
    project = Project(id="p1", goal_id="g1", name="Project", created_at=CREATED)
    topic = Topic(id="t1", project_id="p1", name="Renamed", color="#22c55e", created_at=CREATED)
    stale = _session("s1", topic_id="t1", topic_name="Old name", project_id="p_moved", goal_id="g_moved")
    loose_break = _session("s2", type="break", project_id="p1", goal_id="g1")
    data = HierarchyData(
        goals=[*base.goals, goal],
        projects=[*base.projects, project],
        topics=[*base.topics, topic],
        sessions=[stale, loose_break],
    )

    result = migrate_hierarchy(data, now=NOW)

    focus, rest = result.data.sessions
    assert (focus.topic_name, focus.project_id, focus.goal_id) == ("Renamed", "p1", "g1")
    assert (rest.topic_id, rest.project_id, rest.goal_id) == (None, None, None)
    assert result.report.sessions_rederived == 2
    assert result.report.sessions_rebound == 0


def _random_hierarchy(rng: random.Random) -> HierarchyData:
    goal_ids = [f"g{i}" for i in range(rng.randint(0, 3))]
    project_ids = [f"p{i}" for i in range(rng.randint(0, 4))]
    topic_ids = [f"t{i}" for i in range(rng.randint(0, 5))]
    names = ["Work", "Unassigned", "Study"]

    def pick(pool, *extra):
        return rng.choice([*pool, *extra])

    goals = [
        Goal(id=goal_id, name=rng.choice(names), created_at=CREATED, archived=rng.random() < 0.2)
        for goal_id in goal_ids
    ]
    if rng.random() < 0.3:
        goals.append(Goal(id=UNASSIGNED_GOAL_ID, name="Unassigned", created_at=CREATED, archived=rng.random() < 0.5))
    projects = [
        Project(
            id=project_id,
            goal_id=pick(goal_ids, "missing", UNASSIGNED_GOAL_ID),
            name=rng.choice(names),
            created_at=CREATED,
            archived=rng.random() < 0.2,
        )
        for project_id in project_ids
    ]
    topics = [
        Topic(
            id=topic_id,
            project_id=pick(project_ids, None, "missing", UNASSIGNED_PROJECT_ID),
            name=rng.choice(names),
            color="#22c55e",
            created_at=CREATED,
            archived=rng.random() < 0.2,
        )
        for topic_id in topic_ids
    ]
    sessions = [
        _session(
            f"s{i}",
            type=rng.choice(["focus", "break"]),
            topic_id=pick(topic_ids, None, "missing", UNASSIGNED_TOPIC_ID),
            topic_name=rng.choice([None, "stale"]),
            project_id=pick(project_ids, None, "missing"),
            goal_id=pick(goal_ids, None, "missing"),
        )
        for i in range(rng.randint(0, 6))
    ]
    return HierarchyData(goals=goals, projects=projects, topics=topics, sessions=sessions)


@pytest.mark.parametrize("seed", range(50))
def test_random_data_is_repaired_and_idempotent(seed) -> None:
    data = _random_hierarchy(random.Random(seed))

    first = migrate_hierarchy(data, now=NOW)
    second = migrate_hierarchy(first.data, now=NOW)

    _assert_consistent(first.data)
    assert second.data == first.data
    assert second.report.changed is False
    assert [session.id for session in first.data.sessions] == [session.id for session in data.sessions]
