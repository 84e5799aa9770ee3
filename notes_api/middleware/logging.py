"""
Notes API - Request Logging Middleware
========================================

What:  One access-log line per note request with status and duration.
Who:   Applied to every request via Starlette middleware, inside
       RequestIDMiddleware so the request ID is already known.

Log line:
    PUT /notes/todo 200 1.8ms [a1b2c3d4] from 127.0.0.1

Request bodies (note text) are never logged. A request whose handler raised
an unhandled exception is logged as 500 before the exception moves on to
the error middleware.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notes_api.middleware.request_id import request_id_var

logger = logging.getLogger("notes_api.access")

# Health checks and the Swagger UI assets
QUIET_PATHS = {"/health", "/openapi.json", "/docs", "/docs/oauth2-redirect"}


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status, duration, request ID, and client IP."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            self._log(request, status, (time.perf_counter() - start_time) * 1000)

    def _log(self, request: Request, status: int, duration_ms: float) -> None:
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        note_name = request.path_params.get("name")

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "note_name": note_name,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
