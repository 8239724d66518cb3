"""
Swagger Manager Backend - Request Logging Middleware
======================================================

What:  One access log line per HTTP request.
How:   Measures wall time around the downstream app and logs method, path,
       status, duration, principal and request ID. The level follows the
       status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

What we log vs what we don't:
    Log:        method, path, status, duration, client IP, principal id, request ID
    Don't log:  request bodies (endpoint definitions may hold example payloads)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from swagger_manager.middleware.request_id import request_id_var

logger = logging.getLogger("swagger_manager.access")

# Probed every few seconds by orchestrators
_QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its outcome and duration."""

    def __init__(self, app, principal_header: str = "X-Principal-ID"):
        super().__init__(app)
        self.principal_header = principal_header

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        principal = request.headers.get(self.principal_header, "-") or "-"

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] principal=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            principal,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "principal": principal,
            },
        )
        return response
