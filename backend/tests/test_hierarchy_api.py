from __future__ import annotations

import pytest

from app.core.config import UNASSIGNED_GOAL_ID, UNASSIGNED_PROJECT_ID, UNASSIGNED_TOPIC_ID


def _session_payload(topic_id: str) -> dict:
    return {
        "type": "focus",
        "topic_id": topic_id,
        "start_time": "2026-01-05T09:00:00Z",
        "end_time": "2026-01-05T09:25:00Z",
        "duration_seconds": 1500,
    }


def test_seeded_hierarchy_includes_placeholders(seeded_client) -> None:
    goals = {goal["id"]: goal for goal in seeded_client.get("/api/goals").json()}
    topics = seeded_client.get("/api/topics", params={"project_id": "p-ai-job-seekers"}).json()

    assert goals["g-career"]["name"] == "Career"
    assert UNASSIGNED_GOAL_ID in goals
    assert [topic["name"] for topic in topics] == ["CV", "LinkedIn", "Interviews"]


def test_create_goal_project_topic_chain(seeded_client) -> None:
    goal = seeded_client.post("/api/goals", json={"name": "  Health  "})
    assert goal.status_code == 201
    goal_id = goal.json()["id"]
    assert goal_id.startswith("g_")
    assert goal.json()["name"] == "Health"

    project = seeded_client.post("/api/projects", json={"goal_id": goal_id, "name": "Running", "color": "#ef4444"})
    assert project.status_code == 201
    project_id = project.json()["id"]

    topic = seeded_client.post("/api/topics", json={"project_id": project_id, "name": "Intervals", "color": "#ef4444"})
    assert topic.status_code == 201
    assert topic.json()["id"].startswith("t_")

    by_goal = seeded_client.get("/api/topics", params={"goal_id": goal_id}).json()
    assert [item["name"] for item in by_goal] == ["Intervals"]
    assert [p["id"] for p in seeded_client.get("/api/projects", params={"goal_id": goal_id}).json()] == [project_id]


def test_children_require_live_parent(seeded_client) -> None:
    missing_goal = seeded_client.post("/api/projects", json={"goal_id": "nope", "name": "X"})
    missing_project = seeded_client.post("/api/topics", json={"project_id": "nope", "name": "X", "color": "#fff"})

    assert missing_goal.status_code == 400
    assert missing_goal.json()["detail"] == "goalId does not exist"
    assert missing_project.status_code == 400
    assert missing_project.json()["detail"] == "projectId does not exist"


def test_blank_name_is_rejected(seeded_client) -> None:
    assert seeded_client.post("/api/goals", json={"name": "   "}).status_code == 422


def test_update_merges_and_404s(seeded_client) -> None:
    updated = seeded_client.put("/api/goals/g-career", json={"name": "Career moves"})
    missing = seeded_client.put("/api/goals/nope", json={"name": "Nope"})

    assert updated.status_code == 200
    assert updated.json()["name"] == "Career moves"
    assert updated.json()["archived"] is False
    assert missing.status_code == 404


def test_archive_rules_cascade_bottom_up(seeded_client) -> None:
    blocked_goal = seeded_client.delete("/api/goals/g-career")
    blocked_project = seeded_client.delete("/api/projects/p-ai-job-seekers")
    assert blocked_goal.status_code == 409
    assert blocked_goal.json()["detail"] == "Cannot archive goal with active projects"
    assert blocked_project.json()["detail"] == "Cannot archive project with active topics"

    for topic_id in ("topic-cv", "topic-linkedin", "topic-interviews"):
        assert seeded_client.delete(f"/api/topics/{topic_id}").json()["archived"] is True
    assert seeded_client.delete("/api/projects/p-ai-job-seekers").status_code == 200
    assert seeded_client.delete("/api/goals/g-career").json()["archived"] is True

    goals = {goal["id"]: goal for goal in seeded_client.get("/api/goals").json()}
    assert goals["g-career"]["archived"] is True


def test_topic_with_sessions_cannot_be_archived(seeded_client) -> None:
    assert seeded_client.post("/api/sessions", json=_session_payload("topic-cv")).status_code == 201

    response = seeded_client.put(
        "/api/topics/topic-cv",
        json={"project_id": "p-ai-job-seekers", "name": "CV", "color": "#f97316", "archived": True},
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "Cannot archive topic with existing sessions"


@pytest.mark.parametrize(
    "path",
    [
        f"/api/goals/{UNASSIGNED_GOAL_ID}",
        f"/api/projects/{UNASSIGNED_PROJECT_ID}",
        f"/api/topics/{UNASSIGNED_TOPIC_ID}",
    ],
)
def test_placeholders_cannot_be_archived(seeded_client, path) -> None:
    response = seeded_client.delete(path)

    assert response.status_code == 409


def test_placeholder_project_cannot_move(seeded_client) -> None:
    response = seeded_client.put(
        f"/api/projects/{UNASSIGNED_PROJECT_ID}",
        json={"goal_id": "g-career", "name": "Unassigned"},
    )

    assert response.status_code == 409


def test_placeholder_topic_cannot_move(seeded_client) -> None:
    response = seeded_client.put(
        f"/api/topics/{UNASSIGNED_TOPIC_ID}",
        json={"project_id": "p-ai-job-seekers", "name": "Unassigned", "color": "#64748b"},
    )

    assert response.status_code == 409
    topics = {topic["id"]: topic for topic in seeded_client.get("/api/topics").json()}
    assert topics[UNASSIGNED_TOPIC_ID]["project_id"] == UNASSIGNED_PROJECT_ID


def test_placeholder_topic_can_be_renamed_in_place(seeded_client) -> None:
    response = seeded_client.put(
        f"/api/topics/{UNASSIGNED_TOPIC_ID}",
        json={"project_id": UNASSIGNED_PROJECT_ID, "name": "Inbox", "color": "#64748b"},
    )

    assert response.status_code == 200
    assert response.json()["project_id"] == UNASSIGNED_PROJECT_ID


def test_archived_parent_rejects_new_children(seeded_client) -> None:
    goal_id = seeded_client.post("/api/goals", json={"name": "Side"}).json()["id"]
    seeded_client.delete(f"/api/goals/{goal_id}")

    response = seeded_client.post("/api/projects", json={"goal_id": goal_id, "name": "Late"})

    assert response.status_code == 400
