"""
Invoicer Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the error scenarios of the API.
Why:   Each exception carries the HTTP status it maps to, so the global
       handlers in main.py can render every one of them the same way through
       the response serializer's emit_error().
How:   Each exception class carries a message, a status code and an optional
       context dict (logged, never returned to the client).
Who:   Raised by the request context dependency, services and middleware.

Exception Hierarchy:
    InvoicerError (base)               → 500
    ├── ValidationError                → 400 Bad Request
    ├── AuthenticationError            → 401 Unauthorized
    ├── NotFoundError                  → 404 Not Found
    └── RateLimitExceededError         → 429 Too Many Requests

Store errors (SQLAlchemy exceptions) are deliberately NOT part of this
hierarchy: the serializer propagates them unchanged and the catch-all
handler turns them into a 500.
"""

from typing import Any, Dict, Optional


class InvoicerError(Exception):
    """
    Base exception for all Invoicer application errors.

    Attributes:
        message:     User-facing error description (safe to return in API response)
        status_code: HTTP status the error is rendered with
        context:     Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(InvoicerError):
    """
    Raised when a request parameter cannot be used as given.

    Example response:
        {"error": "per_page must be an integer"}
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(InvoicerError):
    """Raised when the API token header is missing or does not match a token."""

    status_code = 401

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(InvoicerError):
    """
    Raised when a requested record does not exist or is not visible to the
    current user.

    Records owned by other users are reported as missing rather than
    forbidden so the API does not reveal which public ids exist.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "record",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(InvoicerError):
    """
    Raised when an API token exceeds its hourly request allowance.

    Response includes a Retry-After header with the seconds until the
    oldest request in the window expires.
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
