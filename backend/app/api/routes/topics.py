"""Topic API routes."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.errors import domain_errors
from app.api.schemas.hierarchy import Topic, TopicCreateRequest, TopicUpdateRequest
from app.db.deps import get_store
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import hierarchy_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api/topics", tags=["topics"])


@router.get("", response_model=List[Topic])
def list_topics(
    http_request: Request,
    project_id: Optional[str] = Query(default=None),
    goal_id: Optional[str] = Query(default=None),
    store: DocumentStore = Depends(get_store),
) -> List[Topic]:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/topics", "project_id": project_id, "goal_id": goal_id}
    with trace("topics.list", metadata=metadata, request_id=request_id), domain_errors():
        topics = hierarchy_service.list_topics(store, project_id=project_id, goal_id=goal_id)
    log_metric("topics.list.count", len(topics))
    return topics


@router.post("", response_model=Topic, status_code=status.HTTP_201_CREATED)
def create_topic(
    payload: TopicCreateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> Topic:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/topics", "project_id": payload.project_id}
    with trace("topics.create", metadata=metadata, request_id=request_id), domain_errors():
        topic = hierarchy_service.create_topic(store, payload, now=datetime.now(timezone.utc))
    log_metric("topics.create.success", 1)
    return topic


@router.put("/{topic_id}", response_model=Topic)
def update_topic(
    topic_id: str,
    payload: TopicUpdateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> Topic:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/topics/{topic_id}", "topic_id": topic_id}
    with trace("topics.update", metadata=metadata, request_id=request_id), domain_errors():
        return hierarchy_service.update_topic(store, topic_id, payload)


@router.delete("/{topic_id}", response_model=Topic)
def archive_topic(topic_id: str, http_request: Request, store: DocumentStore = Depends(get_store)) -> Topic:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/topics/{topic_id}", "topic_id": topic_id}
    with trace("topics.archive", metadata=metadata, request_id=request_id), domain_errors():
        topic = hierarchy_service.archive_topic(store, topic_id)
    log_metric("topics.archive.success", 1)
    return topic
