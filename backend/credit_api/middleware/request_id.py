"""
Credit API - Request ID Middleware
===================================

What:  Assigns a short correlation ID to each request and echoes it back in
       the X-Request-ID response header.
Who:   Read by the access log middleware and by every exception handler,
       which put it into the JSON error body.

A client that already has an ID (e.g. a frontend tracing a user action)
sends it in X-Request-ID and the same value is reused.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Stores the request ID in request_id_var and request.state.request_id."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 hex chars are plenty to tell requests apart in a log stream
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
