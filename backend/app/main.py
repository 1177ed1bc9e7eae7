"""Main FastAPI application for the Pomodoro planner backend."""
import asyncio
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request

from app.api.routes.goals import router as goals_router
from app.api.routes.jobs import router as jobs_router
from app.api.routes.planner import router as planner_router
from app.api.routes.projects import router as projects_router
from app.api.routes.recurring import router as recurring_router
from app.api.routes.sessions import router as sessions_router
from app.api.routes.settings import router as settings_router
from app.api.routes.templates import router as templates_router
from app.api.routes.topics import router as topics_router
from app.api.routes.transfer import router as transfer_router
from app.core.config import settings
from app.core.context import request_context
from app.core.logging import configure_logging
from app.core.middleware import RequestIDMiddleware
from app.db.deps import close_store, get_store
from app.observability.client import init_opik
from app.observability.tracing import trace
from app.services.data_service import initialize_data

configure_logging(log_level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(settings_router)
app.include_router(goals_router)
app.include_router(projects_router)
app.include_router(topics_router)
app.include_router(sessions_router)
app.include_router(planner_router)
app.include_router(recurring_router)
app.include_router(templates_router)
app.include_router(transfer_router)
app.include_router(jobs_router)


def bootstrap_data() -> None:
    """Seed and heal the stored data; blocks until the queued writes finish."""
    with request_context("startup"), trace("app.bootstrap"):
        initialize_data(get_store(), now=datetime.now(timezone.utc))


@app.on_event("startup")
async def startup() -> None:
    init_opik()
    if not settings.bootstrap_on_startup:
        logger.info("Startup bootstrap disabled")
        return
    await asyncio.to_thread(bootstrap_data)


@app.on_event("shutdown")
async def shutdown() -> None:
    close_store()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
