"""Platform user CRUD operations."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.db.models import User


async def list_users(session: AsyncSession) -> List[User]:
    """List users, newest first."""
    result = await session.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def get_user_by_id(
    session: AsyncSession,
    user_id: str
) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.id == user_id)
    )
    return result.scalar_one_or_none()


async def update_user(
    session: AsyncSession,
    user_id: str,
    changes: Dict[str, Any],
    auto_commit: bool = True
) -> Optional[User]:
    """Apply ``changes`` to a user and refresh ``updated_at``.

    Args:
        session: Database session from FastAPI dependency
        user_id: The user ID to update
        changes: Column values to set; callers restrict the keys
        auto_commit: Whether to commit the transaction

    Returns:
        The updated User, or None if the user does not exist
    """
    user = await get_user_by_id(session, user_id)
    if user is None:
        return None

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = datetime.now(timezone.utc)

    if auto_commit:
        await session.commit()
        await session.refresh(user)
    return user


async def set_kuppi_approval(
    session: AsyncSession,
    user_id: str,
    approved: bool,
    auto_commit: bool = True
) -> Optional[User]:
    """Grant or revoke a user's permission to publish kuppis."""
    return await update_user(
        session,
        user_id,
        {"is_approved_for_kuppies": approved},
        auto_commit=auto_commit,
    )


async def delete_user(
    session: AsyncSession,
    user_id: str,
    auto_commit: bool = True
) -> bool:
    result = await session.execute(delete(User).where(User.id == user_id))
    if auto_commit:
        await session.commit()
    return result.rowcount > 0
