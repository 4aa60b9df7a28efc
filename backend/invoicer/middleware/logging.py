"""
Invoicer Backend — Request Logging Middleware
===============================================

What:  One access log line per HTTP request, plus the number of SQL
       statements the request ran when query logging is enabled.
How:   Measures duration around call_next; with LOG_QUERIES on, installs a
       QueryCounter in the database module's ContextVar so the engine
       event hook counts every statement executed for this request.
When:  After RequestIDMiddleware (uses request ID for correlation).

Log line:
    GET /api/v1/clients 200 12.3ms [a1b2c3d4] from 10.0.0.7
    GET http://host/api/v1/clients?include=invoices: 4 queries   (LOG_QUERIES)

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID, query count
    ❌ Don't log: API token header, response bodies (client PII)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from invoicer.config import settings
from invoicer.database import QueryCounter, query_counter_var
from invoicer.middleware.request_id import request_id_var

logger = logging.getLogger("invoicer.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration of each request.

    Log level follows the status: 5xx → ERROR, 4xx → WARNING, else INFO.
    Health checks are skipped (load balancers poll it every few seconds).
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        if path == "/health":
            return await call_next(request)

        counter = None
        token = None
        if settings.log_queries:
            counter = QueryCounter()
            token = query_counter_var.set(counter)

        try:
            response = await call_next(request)
        finally:
            if token is not None:
                query_counter_var.reset(token)

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

        if counter is not None:
            logger.info("%s %s: %d queries", method, request.url, counter.count)

        return response
