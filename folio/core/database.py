"""Async SQLAlchemy database setup."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from folio.config import Settings, settings

logger = logging.getLogger(__name__)


def _engine_options(app_settings: Settings) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": app_settings.database_echo}
    if app_settings.database_url.startswith("sqlite"):
        return options
    options.update(
        pool_size=app_settings.database_pool_size,
        max_overflow=app_settings.database_max_overflow,
        pool_pre_ping=True,
        pool_recycle=300,  # Recycle connections every 5 min to avoid server-side timeouts
    )
    return options


def build_engine(app_settings: Settings | None = None) -> AsyncEngine:
    """Create an async engine for the configured database URL."""
    resolved = app_settings or settings
    return create_async_engine(resolved.database_url, **_engine_options(resolved))


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine()
async_session_maker = build_session_maker(engine)


@asynccontextmanager
async def get_session_context(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Read-only session as a context manager for non-DI usage.

    The content core never writes, so the transaction is always rolled back
    on exit instead of committed.
    """
    async with (session_factory or async_session_maker)() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Initialize database (create tables if needed)."""
    logger.info("Initializing database tables")
    from folio.models.base import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    logger.info("Closing database connections")
    await engine.dispose()
