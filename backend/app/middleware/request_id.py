"""
Patient Notes Backend — Request ID Middleware
==============================================

What:  Gives every request a correlation id and returns it in `X-Request-ID`.
How:   Reuses a client-supplied `X-Request-ID` header when present, otherwise
       generates a short UUID prefix. The id is stored in a ContextVar so the
       access log and the exception handlers can include it, and in
       `request.state` for route handlers.

Error responses echo the id as `requestId`, so a clinician reporting a
failure can quote it and support can find the matching log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns `X-Request-ID` to each request and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
