"""Operational endpoints for scheduler jobs."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.errors import domain_errors
from app.api.schemas.jobs import JobRunRequest, JobRunResponse
from app.core.config import settings
from app.db.deps import get_store
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.document_store import DocumentStore
from app.services.job_runner import HIERARCHY_REPAIR_JOB, run_hierarchy_repair

router = APIRouter()


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"route": "/jobs"}, request_id=request_id):
        data = {
            "scheduler_enabled": settings.scheduler_enabled,
            "schedule": {
                "timezone": settings.scheduler_timezone,
                "jobs": [
                    {
                        "id": HIERARCHY_REPAIR_JOB,
                        "trigger": "daily",
                        "time": f"{settings.repair_job_hour:02d}:{settings.repair_job_minute:02d}",
                    }
                ],
            },
        }
    return {**data, "request_id": request_id or ""}


@router.post("/jobs/run-now", response_model=JobRunResponse, tags=["jobs"])
def run_job_now(
    request: Request,
    payload: JobRunRequest,
    store: DocumentStore = Depends(get_store),
) -> JobRunResponse:
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    start = perf_counter()
    with trace("jobs.run_now", metadata={"job": payload.job}, request_id=request_id), domain_errors():
        result = run_hierarchy_repair(store)

    log_metric("jobs.run_now.success", 1, metadata={"job": payload.job})
    log_metric("jobs.run_now.latency_ms", (perf_counter() - start) * 1000, metadata={"job": payload.job})

    return JobRunResponse(
        job=result.job,
        changed=result.changed,
        repairs=result.repairs,
        request_id=request_id or "",
    )
