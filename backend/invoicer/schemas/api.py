"""
Invoicer Backend — API Parameter and Response Schemas
=======================================================

What:  Pydantic models for the query parameters every list/show endpoint
       accepts and for the small fixed-shape responses (errors, health).
Why:   Entity payloads are shaped by transformers, but the request contract
       is the same for all endpoints and belongs in one validated model.

Request parameters:
    include:     Comma-separated relation names to embed
    serializer:  "array" (default, flat) or "jsonapi" (typed)
    per_page:    Page size, clamped to [1, MAX_API_PAGE_SIZE]
    page:        1-based page number
    updated_at:  UNIX timestamp; only rows (or included relations) changed since
    client_id:   Public id of the client the rows must belong to
    index:       Envelope key wrapping the payload; "none" disables wrapping
"""

from typing import Optional

from pydantic import BaseModel, Field

from invoicer.transformers.base import OutputMode


class ApiParams(BaseModel):
    include: str = Field(default="", description="Comma-separated relations to embed")
    serializer: str = Field(default=OutputMode.FLAT.value, description="'array' or 'jsonapi'")
    per_page: Optional[int] = Field(default=None, description="Page size for list endpoints")
    page: int = Field(default=1, ge=1, description="1-based page number")
    updated_at: Optional[int] = Field(
        default=None, description="UNIX timestamp filter for list endpoints"
    )
    client_id: Optional[int] = Field(default=None, description="Client public id filter")
    index: str = Field(default="data", description="Envelope key; 'none' disables wrapping")

    @property
    def output_mode(self) -> OutputMode:
        return OutputMode.from_param(self.serializer)


class ErrorResponse(BaseModel):
    """Body of every error response, rendered by emit_error()."""

    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
