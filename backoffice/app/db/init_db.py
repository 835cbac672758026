"""Database initialization utilities."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from backoffice.app.core.logging import get_logger
from backoffice.app.db import models  # noqa: F401 - import to register models
from backoffice.app.db.async_session import get_async_engine
from backoffice.app.db.base import Base

logger = get_logger(__name__)


async def init_database(engine: AsyncEngine | None = None, drop_first: bool = False) -> None:
    """Create all tables that do not exist yet."""
    if engine is None:
        engine = get_async_engine()

    async with engine.begin() as conn:
        if drop_first:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def verify_connection(engine: AsyncEngine | None = None) -> bool:
    """Return True if the database answers a trivial query."""
    if engine is None:
        engine = get_async_engine()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error(f"Database connection check failed: {exc}")
        return False
    return True
