"""
Database Connection Management

This module provides async database connectivity using SQLAlchemy's async engine
with PostgreSQL. The engine and session factory are created lazily, once per
process, behind accessor functions: every request reuses the same connection
pool instead of opening new connections against the database's limit.

The async session pattern ensures proper resource cleanup and supports
concurrent request handling without blocking the event loop.
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import get_settings


@lru_cache()
def get_engine() -> AsyncEngine:
    """Create the process-wide async engine on first use."""
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
    )


@lru_cache()
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Create the process-wide session factory on first use."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def dispose_engine() -> None:
    """Close pooled connections if the engine was ever created."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        get_sessionmaker.cache_clear()
        get_engine.cache_clear()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session for dependency injection."""
    async with get_sessionmaker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
