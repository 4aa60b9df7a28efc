"""
Invoicer Backend — Request ID Middleware
==========================================

What:  Tags each request with a correlation ID for the access log and the
       X-Request-ID response header.
How:   A client-supplied X-Request-ID is reused only when it is 1-64
       characters of letters, digits and hyphens; anything else (too long,
       spaces, control characters) is replaced by a fresh short UUID so it
       never reaches the logs.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9-]{1,64}")

# Read by RequestLoggingMiddleware and the exception handlers in main.py
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(supplied: Optional[str]) -> str:
    """The client's ID when it is safe to log, otherwise a new one."""
    if supplied and _SAFE_REQUEST_ID.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
