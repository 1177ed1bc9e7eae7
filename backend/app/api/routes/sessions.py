"""Session history API routes."""
from __future__ import annotations

from datetime import datetime, timezone
from time import perf_counter
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from app.api.errors import domain_errors
from app.api.schemas.hierarchy import SessionCreateRequest, SessionRecord, SessionType, SessionUpdateRequest
from app.db.deps import get_store
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import session_service
from app.services.document_store import DocumentStore
from app.services.session_service import SessionFilters

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("", response_model=List[SessionRecord])
def list_sessions(
    http_request: Request,
    from_: Optional[datetime] = Query(default=None, alias="from"),
    to: Optional[datetime] = Query(default=None),
    type: Optional[SessionType] = Query(default=None),
    topic_id: Optional[str] = Query(default=None),
    project_id: Optional[str] = Query(default=None),
    goal_id: Optional[str] = Query(default=None),
    store: DocumentStore = Depends(get_store),
) -> List[SessionRecord]:
    """List sessions whose start time falls in ``[from, to]``, optionally narrowed by type or hierarchy."""
    request_id = getattr(http_request.state, "request_id", None)
    filters = SessionFilters(
        start_from=from_,
        start_to=to,
        type=type,
        topic_id=topic_id,
        project_id=project_id,
        goal_id=goal_id,
    )
    metadata = {
        "route": "/api/sessions",
        "from": from_.isoformat() if from_ else None,
        "to": to.isoformat() if to else None,
        "type": type,
    }
    with trace("sessions.list", metadata=metadata, request_id=request_id), domain_errors():
        sessions = session_service.list_sessions(store, filters)
    log_metric("sessions.list.count", len(sessions))
    return sessions


@router.post("", response_model=SessionRecord, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: SessionCreateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> SessionRecord:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/sessions", "type": payload.type, "topic_id": payload.topic_id}
    start = perf_counter()
    with trace("sessions.create", metadata=metadata, request_id=request_id), domain_errors():
        record = session_service.create_session(store, payload, now=datetime.now(timezone.utc))
    log_metric("sessions.create.success", 1, metadata={"type": record.type})
    log_metric("sessions.create.latency_ms", (perf_counter() - start) * 1000)
    return record


@router.put("/{session_id}", response_model=SessionRecord)
def update_session(
    session_id: str,
    payload: SessionUpdateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> SessionRecord:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/sessions/{session_id}", "session_id": session_id}
    with trace("sessions.update", metadata=metadata, request_id=request_id), domain_errors():
        return session_service.update_session(store, session_id, payload)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, http_request: Request, store: DocumentStore = Depends(get_store)) -> Response:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/sessions/{session_id}", "session_id": session_id}
    with trace("sessions.delete", metadata=metadata, request_id=request_id), domain_errors():
        removed = session_service.delete_session(store, session_id)
    log_metric("sessions.delete.success", 1, metadata={"removed": removed})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
