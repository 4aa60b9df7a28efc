"""
Invoicer Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, declarative base, FastAPI
       session dependency and the per-request SQL statement counter.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling and provides a session
       dependency that rolls back on error and always closes the session.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (used by the test suite) get SQLAlchemy's default pool because
    its in-memory pools reject the sizing arguments.
"""

from contextvars import ContextVar
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from invoicer.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the session commits,
# async sessions cannot lazy-load them back
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they register with a single
    metadata object (used by Alembic and by the test suite's create_all).
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The API is read-only, so there is nothing to commit; the session is
    rolled back on error and closed in every case.

    Raises:
        Any database exceptions are propagated to the global error handler,
        which renders them as 500 responses.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Query Counting ────────────────────────────────────────────────────────
class QueryCounter:
    """Mutable per-request tally of SQL statements."""

    def __init__(self) -> None:
        self.count = 0


# Installed by RequestLoggingMiddleware for each request when log_queries is on.
# The listener mutates the counter in place, so increments made inside
# SQLAlchemy's greenlet are visible to the request coroutine.
query_counter_var: ContextVar[Optional[QueryCounter]] = ContextVar("query_counter", default=None)


@event.listens_for(Engine, "before_cursor_execute")
def _count_query(conn, cursor, statement, parameters, context, executemany):
    counter = query_counter_var.get()
    if counter is not None:
        counter.count += 1


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections; called during application shutdown."""
    await engine.dispose()
