"""
Invoicer Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn invoicer.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Throttle    │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes (/api/v1, read-only):                       │
    │  clients · contacts · vendors · invoices ·          │
    │  expenses · users          + GET /health            │
    │                                                     │
    │  Exception Handlers (all write {"error": ...}):     │
    │  InvoicerError→own status │ bad params→400 │ *→500  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log where the server listens
    Shutdown: dispose the database engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from invoicer import __version__
from invoicer.config import settings
from invoicer.database import dispose_engine
from invoicer.exceptions import InvoicerError, RateLimitExceededError
from invoicer.middleware.logging import RequestLoggingMiddleware
from invoicer.middleware.rate_limit import RateLimitMiddleware
from invoicer.middleware.request_id import RequestIDMiddleware, request_id_var
from invoicer.routes import clients, contacts, expenses, health, invoices, users, vendors
from invoicer.services.serializer import emit_error

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] invoicer.access: GET /api/v1/clients 200 ...

    Called once during startup, before anything else logs.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Our own query counter replaces SQLAlchemy's per-statement echo.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Invoicer API %s starting up...", __version__)
    logger.info(
        "Page size: default %d, max %d | Throttle: %d requests per %ds",
        settings.default_api_page_size,
        settings.max_api_page_size,
        settings.api_requests_per_hour,
        settings.rate_limit_window,
    )
    if settings.log_queries:
        logger.info("Per-request query counting enabled")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Invoicer API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"error": message}` responses via emit_error.

    Handler hierarchy:
        InvoicerError (and subclasses) → the exception's own status code
        RequestValidationError         → 400 (malformed query parameter)
        HTTPException (routing)        → its status code (e.g. 404, 405)
        Exception (fallback)           → 500 with a generic message

    Internal details (stack traces, SQL) are logged, never sent.
    """

    @app.exception_handler(InvoicerError)
    async def handle_invoicer_error(request: Request, exc: InvoicerError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        response = emit_error(exc.message, exc.status_code)
        if isinstance(exc, RateLimitExceededError):
            response.headers["Retry-After"] = str(exc.retry_after)
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
            message = f"Invalid value for {field}: {first.get('msg', 'invalid')}"
        else:
            message = "Invalid request"
        logger.warning("[%s] %s", request_id_var.get(""), message)
        return emit_error(message, 400)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return emit_error(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, full stack trace logged server-side only."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return emit_error("An unexpected error occurred. Please try again or contact support.", 500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Invoicer API",
        description=(
            "Read API for an invoicing system: clients, contacts, vendors, invoices, "
            "expenses and users, with includes, pagination and JSON:API output."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS → route

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Total-Count",
            "X-Api-Version",
            "Retry-After",
        ],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(clients.router)
    app.include_router(contacts.router)
    app.include_router(vendors.router)
    app.include_router(invoices.router)
    app.include_router(expenses.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `invoicer.main:app` to be importable
app = create_app()
