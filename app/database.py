"""Database engine, session factory and request-scoped sessions."""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from app.config import settings

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict[str, Any]:
    """Build engine keyword arguments for the given database URL."""
    options: dict[str, Any] = {"echo": settings.app_debug, "future": True}

    if url.startswith("sqlite"):
        # One shared connection so in-memory databases survive across sessions
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    elif settings.is_development:
        options["poolclass"] = NullPool
    else:
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
        options["pool_pre_ping"] = True

    return options


def create_engine(url: str | None = None) -> AsyncEngine:
    """Create the async database engine."""
    url = url or settings.async_database_url
    async_engine = create_async_engine(url, **engine_options(url))

    if url.startswith("sqlite"):
        # SQLite leaves ON DELETE CASCADE off unless asked per connection
        @event.listens_for(async_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return async_engine


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = create_engine()
async_session_factory = create_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields a database session.

    The session commits when the request handler returns and rolls back
    if it raises, so every request is one unit of work.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            logger.exception("Database error, rolling back request transaction")
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
