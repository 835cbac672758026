"""Kuppi (tutorial video) CRUD operations."""
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.app.db.models import Video


def kuppi_to_dict(video: Video) -> Dict[str, Any]:
    """Serialize a video with its module and tutor summaries.

    Both relationships must have been eager-loaded.
    """
    data = video.to_dict()
    module = video.module
    student = video.student
    data["modules"] = (
        {"id": module.id, "code": module.code, "name": module.name} if module else None
    )
    data["students"] = {"id": student.id, "name": student.name} if student else None
    return data


def _with_relations(query):
    return query.options(selectinload(Video.module), selectinload(Video.student))


async def list_kuppis(session: AsyncSession) -> List[Video]:
    """List videos with module and tutor, newest first."""
    result = await session.execute(
        _with_relations(select(Video)).order_by(Video.created_at.desc())
    )
    return list(result.scalars().all())


async def get_kuppi_by_id(
    session: AsyncSession,
    kuppi_id: str,
    with_relations: bool = False
) -> Optional[Video]:
    """Get a video by ID.

    Args:
        session: Database session from FastAPI dependency
        kuppi_id: The video ID
        with_relations: Eager-load module and tutor for serialization

    Returns:
        Video object if found, None otherwise
    """
    query = select(Video).where(Video.id == kuppi_id)
    if with_relations:
        query = _with_relations(query)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def create_kuppi(
    session: AsyncSession,
    module_id: str,
    title: str,
    youtube_links: List[str],
    description: Optional[str] = None,
    telegram_links: Optional[List[str]] = None,
    material_urls: Optional[List[str]] = None,
    student_id: Optional[str] = None,
    language_code: Optional[str] = None,
    added_by_user_id: Optional[str] = None,
    auto_commit: bool = True
) -> Video:
    """Create a kuppi.

    New kuppis always start unapproved and visible; the language defaults
    to Sinhala ("si").

    Returns:
        The created Video object
    """
    video = Video(
        module_id=module_id,
        title=title,
        description=description,
        youtube_links=youtube_links,
        telegram_links=telegram_links,
        material_urls=material_urls,
        student_id=student_id,
        added_by_user_id=added_by_user_id,
        language_code=language_code or "si",
        is_kuppi=True,
        is_approved=False,
        is_hidden=False,
    )
    session.add(video)
    if auto_commit:
        await session.commit()
        await session.refresh(video)
    return video


async def update_kuppi(
    session: AsyncSession,
    kuppi_id: str,
    changes: Dict[str, Any],
    auto_commit: bool = True
) -> Optional[Video]:
    video = await get_kuppi_by_id(session, kuppi_id)
    if video is None:
        return None

    for key, value in changes.items():
        setattr(video, key, value)

    if auto_commit:
        await session.commit()
        await session.refresh(video)
    return video


async def delete_kuppi(
    session: AsyncSession,
    kuppi_id: str,
    auto_commit: bool = True
) -> bool:
    result = await session.execute(delete(Video).where(Video.id == kuppi_id))
    if auto_commit:
        await session.commit()
    return result.rowcount > 0
