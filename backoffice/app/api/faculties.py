from typing import Annotated

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.services.validation import ValidationRule

router = APIRouter()

FACULTY_RULES = {
    "name": ValidationRule("Name", required=True, type="string", min_length=1, max_length=200),
}


@router.get("")
async def list_faculties(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """List all faculties."""
    faculties = await ctx.store(crud.list_faculties(session), "Failed to fetch faculties")
    return {"faculties": [f.to_dict() for f in faculties]}


@router.post("")
async def create_faculty(
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=FACULTY_RULES))],
    session: SessionDep,
) -> dict:
    """Create a faculty."""
    faculty = await ctx.store(
        crud.create_faculty(session, name=ctx.data["name"]),
        "Failed to create faculty",
    )
    return {"faculty": faculty.to_dict()}
