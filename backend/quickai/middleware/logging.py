"""
QuickAI Backend - Access Logging Middleware
============================================

What:  One log line per HTTP request: method, path, status, duration, request id.
Who:   Applied to every request except `/` and `/health`.

Level by status:
    5xx → ERROR, 4xx → WARNING, otherwise INFO.

Action failures are HTTP 200, so they log at INFO here; ActionService logs
the failure itself at ERROR.

Never logged: request bodies (prompts, resumes, images) and the
Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from quickai.middleware.request_id import request_id_var

logger = logging.getLogger("quickai.access")

# Why skip: uptime monitors hit these every few seconds and would drown the
# action traffic in the access log.
_QUIET_PATHS = {"/", "/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request's outcome on the `quickai.access` logger."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
