"""
Patient Notes Backend — Request Logging Middleware
===================================================

What:  One access-log line per HTTP request: method, path, status, duration,
       request id and client address.
When:  Runs inside RequestIDMiddleware, so the request id is already set.

Log line:
    2026-10-19T09:12:44 [INFO] patient_notes.access: POST /notes 201 4.2ms [1f2e3d4c] from 10.0.0.7

What we log vs what we DON'T log (privacy):
    Logged: method, path, status, duration, IP, request id
    Never logged: request or response bodies (patient names, note content)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("patient_notes.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request once it has a response.

    Level follows the status code: 5xx → ERROR, 4xx → WARNING, else INFO.
    GET /health is skipped; probes hit it every few seconds.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
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
