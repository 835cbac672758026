"""Module and module assignment CRUD operations."""
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.db.models import Module, ModuleAssignment


async def list_modules(session: AsyncSession) -> List[Module]:
    """List modules ordered by code."""
    result = await session.execute(select(Module).order_by(Module.code))
    return list(result.scalars().all())


async def get_module_by_id(
    session: AsyncSession,
    module_id: str
) -> Optional[Module]:
    """Get a module by ID.

    Returns:
        Module object if found, None otherwise
    """
    result = await session.execute(
        select(Module).where(Module.id == module_id)
    )
    return result.scalar_one_or_none()


async def create_module(
    session: AsyncSession,
    code: str,
    name: str,
    description: Optional[str] = None,
    auto_commit: bool = True
) -> Module:
    """Create a module.

    Args:
        session: Database session from FastAPI dependency
        code: Unique course code (e.g. "CS1012")
        name: Module title
        description: Optional free text
        auto_commit: Whether to commit the transaction

    Returns:
        The created Module object
    """
    module = Module(code=code, name=name, description=description)
    session.add(module)
    if auto_commit:
        await session.commit()
        await session.refresh(module)
    return module


async def update_module(
    session: AsyncSession,
    module_id: str,
    changes: Dict[str, Any],
    auto_commit: bool = True
) -> Optional[Module]:
    """Apply ``changes`` to a module.

    Returns:
        The updated Module, or None if the module does not exist
    """
    module = await get_module_by_id(session, module_id)
    if module is None:
        return None

    for key, value in changes.items():
        setattr(module, key, value)

    if auto_commit:
        await session.commit()
        await session.refresh(module)
    return module


async def delete_module(
    session: AsyncSession,
    module_id: str,
    auto_commit: bool = True
) -> bool:
    """Delete a module together with its curriculum assignments.

    Returns:
        True if the module existed, False otherwise
    """
    await session.execute(
        delete(ModuleAssignment).where(ModuleAssignment.module_id == module_id)
    )
    result = await session.execute(delete(Module).where(Module.id == module_id))

    if auto_commit:
        await session.commit()
    return result.rowcount > 0


async def list_assignments(session: AsyncSession) -> List[ModuleAssignment]:
    """List module assignments in creation order."""
    result = await session.execute(
        select(ModuleAssignment).order_by(ModuleAssignment.created_at)
    )
    return list(result.scalars().all())


async def find_assignment(
    session: AsyncSession,
    module_id: str,
    faculty_id: str,
    department_id: str,
    semester_id: str
) -> Optional[ModuleAssignment]:
    """Find the assignment occupying a module/faculty/department/semester slot."""
    result = await session.execute(
        select(ModuleAssignment).where(
            ModuleAssignment.module_id == module_id,
            ModuleAssignment.faculty_id == faculty_id,
            ModuleAssignment.department_id == department_id,
            ModuleAssignment.semester_id == semester_id,
        )
    )
    return result.scalar_one_or_none()


async def create_assignment(
    session: AsyncSession,
    module_id: str,
    faculty_id: str,
    department_id: str,
    semester_id: str,
    auto_commit: bool = True
) -> ModuleAssignment:
    assignment = ModuleAssignment(
        module_id=module_id,
        faculty_id=faculty_id,
        department_id=department_id,
        semester_id=semester_id,
    )
    session.add(assignment)
    if auto_commit:
        await session.commit()
        await session.refresh(assignment)
    return assignment


async def delete_assignment(
    session: AsyncSession,
    assignment_id: str,
    auto_commit: bool = True
) -> bool:
    result = await session.execute(
        delete(ModuleAssignment).where(ModuleAssignment.id == assignment_id)
    )
    if auto_commit:
        await session.commit()
    return result.rowcount > 0
