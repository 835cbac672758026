"""Faculty, department and semester CRUD operations."""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.db.models import Department, Faculty, Semester


async def list_faculties(session: AsyncSession) -> List[Faculty]:
    """List faculties ordered by name."""
    result = await session.execute(select(Faculty).order_by(Faculty.name))
    return list(result.scalars().all())


async def create_faculty(
    session: AsyncSession,
    name: str,
    auto_commit: bool = True
) -> Faculty:
    """Create a faculty.

    Args:
        session: Database session from FastAPI dependency
        name: Display name of the faculty
        auto_commit: Whether to commit the transaction

    Returns:
        The created Faculty object
    """
    faculty = Faculty(name=name)
    session.add(faculty)
    if auto_commit:
        await session.commit()
        await session.refresh(faculty)
    return faculty


async def list_departments(session: AsyncSession) -> List[Department]:
    """List departments ordered by name."""
    result = await session.execute(select(Department).order_by(Department.name))
    return list(result.scalars().all())


async def create_department(
    session: AsyncSession,
    name: str,
    faculty_id: str,
    auto_commit: bool = True
) -> Department:
    department = Department(name=name, faculty_id=faculty_id)
    session.add(department)
    if auto_commit:
        await session.commit()
        await session.refresh(department)
    return department


async def list_semesters(session: AsyncSession) -> List[Semester]:
    """List semesters in creation order."""
    result = await session.execute(select(Semester).order_by(Semester.created_at))
    return list(result.scalars().all())


async def create_semester(
    session: AsyncSession,
    name: str,
    auto_commit: bool = True
) -> Semester:
    semester = Semester(name=name)
    session.add(semester)
    if auto_commit:
        await session.commit()
        await session.refresh(semester)
    return semester
