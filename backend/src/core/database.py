"""Database connection and session management."""

from __future__ import annotations

import logging
import time

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from src.core.config import get_settings
from src.core.structured_logging import log_json

settings = get_settings()
logger = logging.getLogger(__name__)

MAX_LOGGED_STATEMENT = 2000


def _async_database_url(url: str) -> str:
    """Map a plain driver URL onto its asyncio driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def install_slow_query_log(sync_engine: Engine, threshold_ms: float) -> None:
    """Log statements slower than ``threshold_ms`` as ``slow_query`` events.

    Only the SQL text is logged. Bound parameters carry attachment payloads
    and never reach the log.
    """

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany) -> None:
        context._siteops_started = time.perf_counter()

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _report(conn, cursor, statement, parameters, context, executemany) -> None:
        started = getattr(context, "_siteops_started", None)
        if started is None:
            return
        elapsed_ms = (time.perf_counter() - started) * 1000
        if elapsed_ms < threshold_ms:
            return
        text = str(statement)
        if len(text) > MAX_LOGGED_STATEMENT:
            text = text[: MAX_LOGGED_STATEMENT - 3] + "..."
        log_json(
            logger,
            logging.WARNING,
            "slow_query",
            duration_ms=round(elapsed_ms, 2),
            statement=text,
        )


def install_sqlite_foreign_keys(sync_engine: Engine) -> None:
    """Turn on SQLite foreign keys so link rows go away with their owner."""

    @event.listens_for(sync_engine, "connect")
    def _enable(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


database_url = _async_database_url(settings.database_url)

# NullPool for test databases so every test gets fresh connections
engine = create_async_engine(
    database_url,
    echo=False,
    poolclass=NullPool if "test" in settings.database_url else None,
)

if database_url.startswith("sqlite"):
    install_sqlite_foreign_keys(engine.sync_engine)
if settings.slow_query_ms > 0:
    install_slow_query_log(engine.sync_engine, settings.slow_query_ms)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """Get database session dependency.

    Commits when the request handler returns, rolls back if it raised.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
