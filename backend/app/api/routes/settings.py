"""Timer settings routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.api.errors import domain_errors
from app.api.schemas.settings import TimerSettings
from app.db.deps import get_store
from app.observability.tracing import trace
from app.services import data_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=TimerSettings)
def get_settings(http_request: Request, store: DocumentStore = Depends(get_store)) -> TimerSettings:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("settings.get", metadata={"route": "/api/settings"}, request_id=request_id), domain_errors():
        return data_service.load_timer_settings(store)


@router.put("", response_model=TimerSettings)
def save_settings(
    payload: TimerSettings,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> TimerSettings:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("settings.save", metadata={"route": "/api/settings"}, request_id=request_id), domain_errors():
        return data_service.save_timer_settings(store, payload)
