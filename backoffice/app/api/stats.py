from typing import Annotated

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep

router = APIRouter()


@router.get("")
async def get_stats(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """Dashboard counters plus the users and kuppis awaiting review."""
    return await ctx.store(crud.get_dashboard_stats(session), "Failed to fetch stats")
