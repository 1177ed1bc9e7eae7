"""Recurring task definition routes."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request

from app.api.errors import domain_errors
from app.api.schemas.planner import RecurringTask
from app.db.deps import get_store
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import planner_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api/recurring", tags=["recurring"])


@router.get("", response_model=List[RecurringTask])
def list_recurring(http_request: Request, store: DocumentStore = Depends(get_store)) -> List[RecurringTask]:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("recurring.list", metadata={"route": "/api/recurring"}, request_id=request_id), domain_errors():
        return planner_service.list_recurring(store)


@router.put("", response_model=List[RecurringTask])
def replace_recurring(
    payload: List[RecurringTask],
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> List[RecurringTask]:
    """Replace every recurring definition with ``payload``."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/recurring", "count": len(payload)}
    with trace("recurring.replace", metadata=metadata, request_id=request_id), domain_errors():
        saved = planner_service.replace_recurring(store, payload)
    log_metric("recurring.replace.count", len(saved))
    return saved
