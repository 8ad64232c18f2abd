"""
Credit API - Request Logging Middleware
========================================

What:  One access log line per HTTP request: method, path, status, duration,
       request ID and client IP.
How:   Timed around call_next; the log level follows the status code so that
       alerting can key on WARNING/ERROR.

Logged vs not logged:
    ✅ method, path, status, duration, IP, request ID
    ❌ bodies and query strings: login bodies and reset-password query
       strings carry plain passwords
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from credit_api.middleware.request_id import request_id_var

logger = logging.getLogger("credit_api.access")

# Probes hit these every few seconds; logging them buries real traffic
QUIET_PATHS = {"/health", "/hello"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Level by status:
        5xx → ERROR
        4xx → WARNING (a rejected transaction is worth seeing)
        else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
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
