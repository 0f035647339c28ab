"""
Async engine and sessions.

Request handlers get a session per request through ``get_db``. Background
tasks outlive the request, so they open their own with ``session_scope``.
Both commit on success and roll back if the work raises.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from fusioncaller.db.config import get_db_settings
from fusioncaller.utils.logger import logger


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


_async_engine: AsyncEngine | None = None
_async_session_local: async_sessionmaker[AsyncSession] | None = None


def get_async_engine() -> AsyncEngine:
    global _async_engine
    if _async_engine is None:
        settings = get_db_settings()
        options: dict[str, Any] = {"echo": settings.echo, "pool_pre_ping": True}
        if settings.is_postgres:
            options.update(pool_size=settings.pool_size, max_overflow=settings.max_overflow)
        _async_engine = create_async_engine(settings.get_async_url(), **options)
    return _async_engine


def get_async_session_local() -> async_sessionmaker[AsyncSession]:
    global _async_session_local
    if _async_session_local is None:
        _async_session_local = async_sessionmaker(
            bind=get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _async_session_local


def set_async_session_local(factory: async_sessionmaker[AsyncSession]) -> None:
    """Install a session factory bound to another engine (tests)."""
    global _async_session_local
    _async_session_local = factory


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    """
    Transactional session.

    Yields:
        AsyncSession: Session that is committed when the block exits cleanly
    """
    async with get_async_session_local()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one transactional session per request."""
    async with session_scope() as session:
        yield session


async def close_db() -> None:
    """Dispose of the engine on shutdown."""
    global _async_engine
    if _async_engine is None:
        return
    await _async_engine.dispose()
    _async_engine = None
    logger.info("Database connections closed")
