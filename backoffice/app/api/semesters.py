from typing import Annotated

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.services.validation import ValidationRule

router = APIRouter()

SEMESTER_RULES = {
    "name": ValidationRule("Name", required=True, type="string", min_length=1, max_length=100),
}


@router.get("")
async def list_semesters(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    semesters = await ctx.store(crud.list_semesters(session), "Failed to fetch semesters")
    return {"semesters": [s.to_dict() for s in semesters]}


@router.post("")
async def create_semester(
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=SEMESTER_RULES))],
    session: SessionDep,
) -> dict:
    semester = await ctx.store(
        crud.create_semester(session, name=ctx.data["name"]),
        "Failed to create semester",
    )
    return {"semester": semester.to_dict()}
