"""Database dependencies for FastAPI dependency injection.

Usage:
    from backoffice.app.db.dependencies import SessionDep

    @router.get("/faculties")
    async def list_faculties(session: SessionDep):
        ...
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.db.async_session import get_db

SessionDep = Annotated[AsyncSession, Depends(get_db)]

__all__ = ["SessionDep"]
