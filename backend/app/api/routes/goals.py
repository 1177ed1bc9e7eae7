"""Goal API routes."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Request, status

from app.api.errors import domain_errors
from app.api.schemas.hierarchy import Goal, GoalCreateRequest, GoalUpdateRequest
from app.db.deps import get_store
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import hierarchy_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.get("", response_model=List[Goal])
def list_goals(http_request: Request, store: DocumentStore = Depends(get_store)) -> List[Goal]:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goals.list", metadata={"route": "/api/goals"}, request_id=request_id), domain_errors():
        goals = hierarchy_service.list_goals(store)
    log_metric("goals.list.count", len(goals))
    return goals


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> Goal:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goals.create", metadata={"route": "/api/goals"}, request_id=request_id), domain_errors():
        goal = hierarchy_service.create_goal(store, payload, now=datetime.now(timezone.utc))
    log_metric("goals.create.success", 1)
    return goal


@router.put("/{goal_id}", response_model=Goal)
def update_goal(
    goal_id: str,
    payload: GoalUpdateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> Goal:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/goals/{goal_id}", "goal_id": goal_id}
    with trace("goals.update", metadata=metadata, request_id=request_id), domain_errors():
        return hierarchy_service.update_goal(store, goal_id, payload)


@router.delete("/{goal_id}", response_model=Goal)
def archive_goal(goal_id: str, http_request: Request, store: DocumentStore = Depends(get_store)) -> Goal:
    """Archive a goal. Goals are never hard-deleted."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/goals/{goal_id}", "goal_id": goal_id}
    with trace("goals.archive", metadata=metadata, request_id=request_id), domain_errors():
        goal = hierarchy_service.archive_goal(store, goal_id)
    log_metric("goals.archive.success", 1)
    return goal
