"""Async database session management for SQLAlchemy 2.0+.

PostgreSQL (asyncpg) in production, SQLite (aiosqlite) for local runs and
tests. The engine is created once per application lifespan.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from backoffice.app.core.config import settings
from backoffice.app.core.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def create_engine_for_url(url: str) -> AsyncEngine:
    """Create an async engine with pool settings suited to the dialect.

    Args:
        url: SQLAlchemy database URL

    Returns:
        AsyncEngine instance
    """
    if url.startswith("sqlite"):
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            # One shared connection so every session sees the same database
            engine = create_async_engine(
                url,
                echo=settings.db_echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            engine = create_async_engine(url, echo=settings.db_echo)
        logger.info("Created SQLite async engine")
        return engine

    engine = create_async_engine(
        url,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=settings.db_pool_pre_ping,
    )
    logger.info(
        f"Created async engine (pool_size={settings.db_pool_size}, "
        f"max_overflow={settings.db_max_overflow}, "
        f"pool_timeout={settings.db_pool_timeout}s)"
    )
    return engine


def configure_engine(database_url: str) -> AsyncEngine:
    """Create the process engine and session maker for ``database_url``."""
    global _engine, _AsyncSessionLocal

    _engine = create_engine_for_url(database_url)
    _AsyncSessionLocal = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return _engine


def get_async_engine() -> AsyncEngine:
    """Get the async engine, creating it from settings on first use."""
    if _engine is None:
        return configure_engine(settings.database_url)
    return _engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession]:
    if _AsyncSessionLocal is None:
        configure_engine(settings.database_url)
    return _AsyncSessionLocal


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Async context manager for database sessions.

    Usage:
        async with get_async_session() as session:
            result = await session.execute(...)
    """
    session_maker = get_async_session_maker()
    async with session_maker() as session:
        yield session


async def close_async_engine() -> None:
    """Dispose the engine on application shutdown."""
    global _engine, _AsyncSessionLocal

    if _engine is not None:
        await _engine.dispose()
        logger.debug("Async engine disposed")
    _engine = None
    _AsyncSessionLocal = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    Transaction handling:
    - Successful requests: pending changes are committed
    - Exceptions: changes are rolled back, exception is re-raised
    """
    async with get_async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
