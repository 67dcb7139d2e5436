"""
API Middleware

Request logging with a per-request id bound into the structlog context,
so every log line emitted while serving a request carries it.
"""

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query) or None,
                client=request.client.host if request.client else None,
            )

            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response
