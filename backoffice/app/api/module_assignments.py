from typing import Annotated

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate, ensure_uuid
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.exceptions import BadRequestError
from backoffice.app.services.validation import PATTERNS, ValidationRule

router = APIRouter()

ASSIGNMENT_RULES = {
    "module_id": ValidationRule("Module ID", required=True, type="string", pattern=PATTERNS["UUID"]),
    "faculty_id": ValidationRule("Faculty ID", required=True, type="string", pattern=PATTERNS["UUID"]),
    "department_id": ValidationRule("Department ID", required=True, type="string", pattern=PATTERNS["UUID"]),
    "semester_id": ValidationRule("Semester ID", required=True, type="string", pattern=PATTERNS["UUID"]),
}


@router.get("")
async def list_assignments(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """List all module assignments."""
    assignments = await ctx.store(
        crud.list_assignments(session), "Failed to fetch module assignments"
    )
    return {"assignments": [a.to_dict() for a in assignments]}


@router.post("")
async def create_assignment(
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=ASSIGNMENT_RULES))],
    session: SessionDep,
) -> dict:
    """Place a module in a faculty / department / semester slot."""
    slot = {key: ctx.data[key] for key in ASSIGNMENT_RULES}

    existing = await ctx.store(
        crud.find_assignment(session, **slot), "Failed to create module assignment"
    )
    if existing is not None:
        raise BadRequestError("This assignment already exists")

    assignment = await ctx.store(
        crud.create_assignment(session, **slot), "Failed to create module assignment"
    )
    return {"assignment": assignment.to_dict()}


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("delete"))],
    session: SessionDep,
) -> dict:
    ensure_uuid(assignment_id, "assignment")
    await ctx.store(
        crud.delete_assignment(session, assignment_id), "Failed to delete module assignment"
    )
    return {"success": True}
