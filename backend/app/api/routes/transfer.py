"""Bulk export and import of the whole data set."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from app.api.errors import domain_errors
from app.api.schemas.transfer import ExportPayload, ImportResponse
from app.core.errors import SchemaError
from app.db.deps import get_store
from app.observability.metrics import log_metric, timed_metric
from app.observability.tracing import trace
from app.services import data_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api", tags=["transfer"])


@router.get("/export", response_model=ExportPayload)
def export_data(http_request: Request, store: DocumentStore = Depends(get_store)) -> ExportPayload:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("transfer.export", metadata={"route": "/api/export"}, request_id=request_id), domain_errors():
        return data_service.export_all(store)


@router.post("/import", response_model=ImportResponse)
def import_data(
    http_request: Request,
    raw: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> ImportResponse:
    """
    Replace all stored data with the posted export payload.

    The hierarchy is repaired before it is stored; the response carries the
    data as persisted plus a count of every repair applied.
    """
    request_id = getattr(http_request.state, "request_id", None)
    with timed_metric("transfer.import", {"route": "/api/import"}):
        with trace("transfer.import", metadata={"route": "/api/import"}, request_id=request_id):
            try:
                result = data_service.import_all(store, raw, now=datetime.now(timezone.utc))
            except SchemaError as exc:
                log_metric("transfer.import.rejected", 1)
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid import payload") from exc
    return ImportResponse(
        **result.payload.model_dump(),
        repairs=result.report.as_dict(),
        request_id=request_id or "",
    )
