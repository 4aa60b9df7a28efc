# Middleware package init
"""
Invoicer Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Rate Limit FIRST: Reject over-quota API tokens before any processing
    2. Request ID: Generate correlation ID for logging and tracing
    3. Logging: Log request details (and query counts) with the request ID
    4. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)

    Responses travel back through the chain in reverse, so the request ID
    header and the logged duration cover everything below them.
"""
