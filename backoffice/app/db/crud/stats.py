"""Dashboard statistics queries."""
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.app.db.models import Module, Student, User, Video

PENDING_KUPPIS_LIMIT = 10


async def _count(session: AsyncSession, query) -> int:
    result = await session.execute(query)
    return result.scalar_one() or 0


async def get_pending_users(session: AsyncSession) -> List[Dict[str, Any]]:
    """Users who have uploaded videos but are not yet approved for kuppis."""
    kuppi_count = func.count(Video.id).label("kuppi_count")
    result = await session.execute(
        select(User, kuppi_count)
        .join(Video, Video.added_by_user_id == User.id)
        .where(User.is_approved_for_kuppies.is_(False))
        .group_by(User.id)
        .order_by(User.created_at.desc())
    )

    pending = []
    for user, count in result.all():
        pending.append({
            "id": user.id,
            "firebase_uid": user.firebase_uid,
            "email": user.email,
            "display_name": user.display_name,
            "photo_url": user.photo_url,
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "is_approved_for_kuppies": user.is_approved_for_kuppies,
            "kuppi_count": count,
        })
    return pending


async def get_pending_kuppis(
    session: AsyncSession,
    limit: int = PENDING_KUPPIS_LIMIT
) -> List[Dict[str, Any]]:
    """Newest unapproved videos with their module and uploader."""
    result = await session.execute(
        select(Video)
        .options(selectinload(Video.module))
        .where(Video.is_approved.is_(False))
        .order_by(Video.created_at.desc())
        .limit(limit)
    )
    videos = list(result.scalars().all())

    uploader_ids = {v.added_by_user_id for v in videos if v.added_by_user_id}
    uploaders: Dict[str, Dict[str, Any]] = {}
    if uploader_ids:
        users = await session.execute(select(User).where(User.id.in_(uploader_ids)))
        for user in users.scalars().all():
            uploaders[user.id] = {
                "id": user.id,
                "email": user.email,
                "display_name": user.display_name,
                "photo_url": user.photo_url,
            }

    return [
        {
            "id": video.id,
            "title": video.title,
            "created_at": video.created_at.isoformat() if video.created_at else None,
            "added_by_user_id": video.added_by_user_id,
            "module_id": video.module_id,
            "modules": (
                {"code": video.module.code, "name": video.module.name}
                if video.module else None
            ),
            "user": uploaders.get(video.added_by_user_id),
        }
        for video in videos
    ]


async def get_dashboard_stats(session: AsyncSession) -> Dict[str, Any]:
    """Collect the counters and review queues shown on the dashboard."""
    return {
        "users": await _count(session, select(func.count(User.id))),
        "modules": await _count(session, select(func.count(Module.id))),
        "kuppis": await _count(
            session, select(func.count(Video.id)).where(Video.is_kuppi.is_(True))
        ),
        "tutors": await _count(session, select(func.count(Student.id))),
        "pendingKuppisCount": await _count(
            session, select(func.count(Video.id)).where(Video.is_approved.is_(False))
        ),
        "pendingUsers": await get_pending_users(session),
        "pendingKuppis": await get_pending_kuppis(session),
    }
