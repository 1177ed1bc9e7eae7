"""Project API routes."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.errors import domain_errors
from app.api.schemas.hierarchy import Project, ProjectCreateRequest, ProjectUpdateRequest
from app.db.deps import get_store
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import hierarchy_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=List[Project])
def list_projects(
    http_request: Request,
    goal_id: Optional[str] = Query(default=None),
    store: DocumentStore = Depends(get_store),
) -> List[Project]:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/projects", "goal_id": goal_id}
    with trace("projects.list", metadata=metadata, request_id=request_id), domain_errors():
        projects = hierarchy_service.list_projects(store, goal_id=goal_id)
    log_metric("projects.list.count", len(projects))
    return projects


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> Project:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/projects", "goal_id": payload.goal_id}
    with trace("projects.create", metadata=metadata, request_id=request_id), domain_errors():
        project = hierarchy_service.create_project(store, payload, now=datetime.now(timezone.utc))
    log_metric("projects.create.success", 1)
    return project


@router.put("/{project_id}", response_model=Project)
def update_project(
    project_id: str,
    payload: ProjectUpdateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> Project:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/projects/{project_id}", "project_id": project_id}
    with trace("projects.update", metadata=metadata, request_id=request_id), domain_errors():
        return hierarchy_service.update_project(store, project_id, payload)


@router.delete("/{project_id}", response_model=Project)
def archive_project(project_id: str, http_request: Request, store: DocumentStore = Depends(get_store)) -> Project:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/projects/{project_id}", "project_id": project_id}
    with trace("projects.archive", metadata=metadata, request_id=request_id), domain_errors():
        project = hierarchy_service.archive_project(store, project_id)
    log_metric("projects.archive.success", 1)
    return project
