"""Custom FastAPI middleware."""
from __future__ import annotations

from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import request_context


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Populate request.state.request_id, bind it for logging, and echo it back."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id

        with request_context(request_id):
            response = await call_next(request)

        response.headers["X-Request-Id"] = request_id
        # Planner and hierarchy reads are computed per request and must not be cached.
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate"
            response.headers["Pragma"] = "no-cache"
        return response
