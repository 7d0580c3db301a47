"""
Database Infrastructure
=======================

Manages database connections, session lifecycle, and engine configuration.

Uses SQLAlchemy 2.0 async engines (asyncpg for PostgreSQL, aiosqlite for
local development and tests).
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from devops_guard.config import Settings, settings as default_settings
from devops_guard.core import ServiceUnavailableException
from devops_guard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    SQLAlchemy 2.0 style using DeclarativeBase.
    All models inherit from this class.
    """
    pass


# Global engine and session maker
_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If engine has not been initialized
    """
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_database() first.")
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the initialized engine."""
    if _session_maker is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _session_maker


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory with the settings every repository expects."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Prevent lazy loading after commit
        autoflush=False,
    )


def init_database(app_settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Initialize the database engine and session maker.

    Should be called during application startup.

    Returns:
        AsyncEngine: The initialized engine
    """
    global _engine, _session_maker

    app_settings = app_settings or default_settings
    database_url = app_settings.database_url

    engine_kwargs = {"echo": app_settings.debug, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = app_settings.db_pool_size
        engine_kwargs["max_overflow"] = app_settings.db_max_overflow

    _engine = create_async_engine(database_url, **engine_kwargs)
    _session_maker = create_session_maker(_engine)

    return _engine


async def close_database() -> None:
    """
    Close the database engine and dispose of connections.

    Should be called during application shutdown.
    """
    global _engine, _session_maker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_maker = None


@asynccontextmanager
async def unit_of_work(
    session_maker: async_sessionmaker[AsyncSession],
    store_name: str,
    operation: str,
) -> AsyncGenerator[AsyncSession, None]:
    """
    One session and one transaction for a single repository call.

    Commits on success and rolls back on any error. Driver and connection
    errors surface as ServiceUnavailableException; everything else
    propagates unchanged.

    Usage:
        async with unit_of_work(self._session_maker, "Work item store", "get") as session:
            model = await session.get(WorkItemModel, item_id)
    """
    try:
        async with session_maker() as session:
            async with session.begin():
                yield session
    except (SQLAlchemyError, OSError) as e:
        logger.error(
            "Database operation failed",
            extra={"store": store_name, "operation": operation, "error": str(e)},
        )
        raise ServiceUnavailableException(
            store_name, f"{operation} failed", cause=e
        ) from e


async def create_tables(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create all database tables.

    Models must be imported before calling so they are registered on Base.
    """
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
