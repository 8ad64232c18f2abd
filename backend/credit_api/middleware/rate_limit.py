"""
Credit API - Rate Limiting Middleware
======================================

What:  Per-IP sliding window rate limiter.
Why:   /Users/login has no lockout of its own; throttling per client IP caps
       how fast passwords can be guessed.
How:   Keeps a list of request timestamps per IP in process memory.

Algorithm: Sliding Window Log
    1. Drop the IP's timestamps older than the window
    2. If the remaining count >= limit, answer 429 with Retry-After
    3. Otherwise record now and pass the request on

Limits:
    State lives in one process. With several uvicorn workers each worker
    counts separately, so the effective limit is limit × workers.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from credit_api.config import settings
from credit_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings):
        rate_limit_requests: Max requests per window
        rate_limit_window:   Window duration in seconds

    Excluded paths: health probe, greeting and the API docs.
    """

    EXCLUDED_PATHS = {"/health", "/hello", "/docs", "/openapi.json", "/redoc"}

    # Sweep idle IPs after this many recorded requests
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        # Behind a proxy this is the proxy's address; run uvicorn with
        # --proxy-headers so request.client reflects X-Forwarded-For
        client_ip = request.client.host if request.client else "unknown"

        now = time.time()
        window_start = now - settings.rate_limit_window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1

            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                settings.rate_limit_window,
            )

            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Forget IPs whose newest request fell out of the window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
