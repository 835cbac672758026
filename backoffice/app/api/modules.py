from dataclasses import replace
from typing import Annotated

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate, ensure_uuid
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.exceptions import BadRequestError, NotFoundError
from backoffice.app.services.validation import PATTERNS, ValidationRule

router = APIRouter()

MODULE_CODE = ValidationRule(
    "Code", type="string", min_length=1, max_length=20, pattern=PATTERNS["ALPHANUMERIC_WITH_SPACES"]
)
MODULE_NAME = ValidationRule("Name", type="string", min_length=1, max_length=200)
MODULE_DESCRIPTION = ValidationRule("Description", type="string", max_length=2000)

CREATE_MODULE_RULES = {
    "code": replace(MODULE_CODE, required=True),
    "name": replace(MODULE_NAME, required=True),
    "description": MODULE_DESCRIPTION,
}

# Only these columns may be changed through PATCH
UPDATE_MODULE_RULES = {
    "code": MODULE_CODE,
    "name": MODULE_NAME,
    "description": MODULE_DESCRIPTION,
}


@router.get("")
async def list_modules(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """List all modules ordered by code."""
    modules = await ctx.store(crud.list_modules(session), "Failed to fetch modules")
    return {"modules": [m.to_dict() for m in modules]}


@router.post("")
async def create_module(
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=CREATE_MODULE_RULES))],
    session: SessionDep,
) -> dict:
    """Create a module."""
    module = await ctx.store(
        crud.create_module(
            session,
            code=ctx.data["code"],
            name=ctx.data["name"],
            description=ctx.data.get("description"),
        ),
        "Failed to create module",
    )
    return {"module": module.to_dict()}


@router.get("/{module_id}")
async def get_module(
    module_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    ensure_uuid(module_id, "module")
    module = await ctx.store(crud.get_module_by_id(session, module_id), "Failed to fetch module")
    if module is None:
        raise NotFoundError("Module")
    return {"module": module.to_dict()}


@router.patch("/{module_id}")
async def update_module(
    module_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=UPDATE_MODULE_RULES))],
    session: SessionDep,
) -> dict:
    """Update a module's code, name or description."""
    ensure_uuid(module_id, "module")
    if not ctx.data:
        raise BadRequestError("No valid fields to update")

    module = await ctx.store(
        crud.update_module(session, module_id, ctx.data),
        "Failed to update module",
    )
    if module is None:
        raise NotFoundError("Module")
    return {"module": module.to_dict()}


@router.delete("/{module_id}")
async def delete_module(
    module_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("delete"))],
    session: SessionDep,
) -> dict:
    """Delete a module and its curriculum assignments."""
    ensure_uuid(module_id, "module")
    await ctx.store(crud.delete_module(session, module_id), "Failed to delete module")
    return {"success": True}
