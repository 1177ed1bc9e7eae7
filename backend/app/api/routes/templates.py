"""Time-blocking template routes."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Request, status

from app.api.errors import domain_errors
from app.api.schemas.planner import TemplateFromDayRequest, TimeBlockingTemplate
from app.db.deps import get_store
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import planner_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", response_model=List[TimeBlockingTemplate])
def list_templates(http_request: Request, store: DocumentStore = Depends(get_store)) -> List[TimeBlockingTemplate]:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("templates.list", metadata={"route": "/api/templates"}, request_id=request_id), domain_errors():
        return planner_service.list_templates(store)


@router.put("", response_model=List[TimeBlockingTemplate])
def replace_templates(
    payload: List[TimeBlockingTemplate],
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> List[TimeBlockingTemplate]:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/templates", "count": len(payload)}
    with trace("templates.replace", metadata=metadata, request_id=request_id), domain_errors():
        return planner_service.replace_templates(store, payload)


@router.post("/from-day", response_model=TimeBlockingTemplate, status_code=status.HTTP_201_CREATED)
def create_template_from_day(
    payload: TemplateFromDayRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> TimeBlockingTemplate:
    """Capture the scheduled tasks of a planner day as a new template."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/templates/from-day", "date": payload.date.isoformat()}
    with trace("templates.from_day", metadata=metadata, request_id=request_id), domain_errors():
        template = planner_service.create_template_from_day(
            store,
            payload.date,
            payload.name,
            now=datetime.now(timezone.utc),
        )
    log_metric("templates.from_day.blocks", len(template.blocks))
    return template
