"""Day and week planner API routes."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request

from app.api.errors import domain_errors
from app.api.schemas.planner import (
    ApplyTemplateRequest,
    PlannerDay,
    PlannerDayResponse,
    PlannerWeekColumn,
    PlannerWeekResponse,
)
from app.db.deps import get_store
from app.observability.metrics import log_metric, timed_metric
from app.observability.tracing import trace
from app.services import planner_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/api/planner", tags=["planner"])


@router.get("", response_model=PlannerDayResponse)
def get_planner_day(
    http_request: Request,
    day: date = Query(..., alias="date"),
    store: DocumentStore = Depends(get_store),
) -> PlannerDayResponse:
    """Return the stored tasks for ``date`` merged with due recurring tasks."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {"route": "/api/planner", "date": day.isoformat()}
    with timed_metric("planner.day", {"route": "/api/planner"}):
        with trace("planner.day", metadata=metadata, request_id=request_id), domain_errors():
            expanded = planner_service.get_planner_day(store, day)
    return _day_response(day, expanded, request_id)


@router.put("", response_model=PlannerDayResponse)
def save_planner_day(
    payload: PlannerDay,
    http_request: Request,
    day: date = Query(..., alias="date"),
    store: DocumentStore = Depends(get_store),
) -> PlannerDayResponse:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/planner", "date": day.isoformat(), "tasks": len(payload.tasks)}
    with trace("planner.save", metadata=metadata, request_id=request_id), domain_errors():
        expanded = planner_service.save_planner_day(store, day, payload)
    log_metric("planner.save.success", 1)
    return _day_response(day, expanded, request_id)


@router.get("/week", response_model=PlannerWeekResponse)
def get_planner_week(
    http_request: Request,
    anchor: date = Query(..., alias="date"),
    store: DocumentStore = Depends(get_store),
) -> PlannerWeekResponse:
    """Seven Monday-first columns for the week containing ``date``."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/planner/week", "date": anchor.isoformat()}
    with timed_metric("planner.week", {"route": "/api/planner/week"}):
        with trace("planner.week", metadata=metadata, request_id=request_id), domain_errors():
            start, end, columns = planner_service.get_planner_week(store, anchor)
    return PlannerWeekResponse(
        start=start,
        end=end,
        days=[PlannerWeekColumn(date=column.date, label=column.label, tasks=column.tasks) for column in columns],
        request_id=request_id or "",
    )


@router.post("/apply-template", response_model=PlannerDayResponse)
def apply_template(
    payload: ApplyTemplateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> PlannerDayResponse:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/api/planner/apply-template", "date": payload.date.isoformat(), "template_id": payload.template_id}
    with trace("planner.apply_template", metadata=metadata, request_id=request_id), domain_errors():
        expanded = planner_service.apply_template_to_day(store, payload.date, payload.template_id)
    log_metric("planner.apply_template.success", 1)
    return _day_response(payload.date, expanded, request_id)


def _day_response(day: date, expanded: PlannerDay, request_id: str | None) -> PlannerDayResponse:
    return PlannerDayResponse(
        date=day,
        tasks=expanded.tasks,
        generated_from_recurring=expanded.generated_from_recurring,
        request_id=request_id or "",
    )
