"""Faculty hierarchy document storage."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.db.models import FacultyHierarchy


async def get_current_hierarchy(session: AsyncSession) -> Optional[FacultyHierarchy]:
    """Return the latest hierarchy row, or None if none has been saved."""
    result = await session.execute(
        select(FacultyHierarchy).order_by(FacultyHierarchy.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def save_hierarchy(
    session: AsyncSession,
    data: Dict[str, Any],
    auto_commit: bool = True
) -> FacultyHierarchy:
    """Replace the current hierarchy document, creating the row if needed."""
    current = await get_current_hierarchy(session)
    if current is None:
        current = FacultyHierarchy(data=data)
        session.add(current)
    else:
        current.data = data
        current.updated_at = datetime.now(timezone.utc)

    if auto_commit:
        await session.commit()
        await session.refresh(current)
    return current
