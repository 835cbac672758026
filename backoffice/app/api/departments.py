from typing import Annotated

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.services.validation import PATTERNS, ValidationRule

router = APIRouter()

DEPARTMENT_RULES = {
    "name": ValidationRule("Name", required=True, type="string", min_length=1, max_length=200),
    "faculty_id": ValidationRule("Faculty ID", required=True, type="string", pattern=PATTERNS["UUID"]),
}


@router.get("")
async def list_departments(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """List all departments."""
    departments = await ctx.store(crud.list_departments(session), "Failed to fetch departments")
    return {"departments": [d.to_dict() for d in departments]}


@router.post("")
async def create_department(
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=DEPARTMENT_RULES))],
    session: SessionDep,
) -> dict:
    """Create a department under a faculty."""
    department = await ctx.store(
        crud.create_department(session, name=ctx.data["name"], faculty_id=ctx.data["faculty_id"]),
        "Failed to create department",
    )
    return {"department": department.to_dict()}
