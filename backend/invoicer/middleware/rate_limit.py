"""
Invoicer Backend — API Throttling Middleware
==============================================

What:  Per-API-token sliding window limit on /api/v1 requests.
Why:   One integration must not starve the others sharing the server.
How:   Tracks request timestamps per token in memory; requests without a
       token fall back to the client IP.

Algorithm: Sliding Window Counter
    1. Each key (token or IP) gets a list of request timestamps
    2. On each request, drop timestamps older than the window
    3. If remaining count >= API_REQUESTS_PER_HOUR, reject with 429
    4. Otherwise record the current timestamp and let it through

Single-process only: state lives in this middleware instance. Multiple
workers each enforce the limit separately.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from invoicer.config import settings
from invoicer.exceptions import RateLimitExceededError
from invoicer.services.serializer import emit_error

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limiter keyed by API token.

    Configuration (from settings):
        api_requests_per_hour: Max requests per window (default: 1000)
        rate_limit_window:     Window duration in seconds (default: 3600)

    Response on limit:
        HTTP 429 with {"error": ...} and a Retry-After header.
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)

    def _key(self, request: Request) -> str:
        token = request.headers.get(settings.api_token_header)
        if token:
            return f"token:{token}"
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        return f"ip:{client_ip}"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(API_PREFIX) or request.method == "OPTIONS":
            return await call_next(request)

        key = self._key(request)
        now = time.time()
        window_start = now - settings.rate_limit_window

        self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

        if len(self._requests[key]) >= settings.api_requests_per_hour:
            oldest = self._requests[key][0]
            retry_after = int(oldest + settings.rate_limit_window - now) + 1

            logger.warning(
                "API limit exceeded for %s: %d requests in %ds window",
                key.split(":", 1)[0],
                len(self._requests[key]),
                settings.rate_limit_window,
            )

            # Raised exceptions would bypass the app's handlers from here
            exc = RateLimitExceededError(retry_after=retry_after)
            response = emit_error(exc.message, exc.status_code)
            response.headers["Retry-After"] = str(exc.retry_after)
            return response

        self._requests[key].append(now)

        if sum(len(v) for v in self._requests.values()) % 1000 == 0:
            self._cleanup_inactive(window_start)

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        """Drops keys with no requests inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive throttle entries", len(inactive))
