"""Platform user administration."""
from typing import Annotated

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate, ensure_uuid
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.exceptions import BadRequestError, NotFoundError
from backoffice.app.services.validation import PATTERNS, ValidationRule

router = APIRouter()

USER_ROLES = ("user", "tutor", "moderator", "admin")

APPROVAL_RULES = {
    "id": ValidationRule("User ID", required=True, type="string", pattern=PATTERNS["UUID"]),
    "is_approved_for_kuppies": ValidationRule("Approval status", required=True, type="boolean"),
}

# Only these columns may be changed through PATCH
UPDATE_USER_RULES = {
    "display_name": ValidationRule("Display name", type="string", min_length=1, max_length=200),
    "email": ValidationRule("Email", type="string", max_length=320, pattern=PATTERNS["EMAIL"]),
    "photo_url": ValidationRule("Photo URL", type="string", max_length=2000, pattern=PATTERNS["URL"]),
    "role": ValidationRule("Role", type="string", enum=USER_ROLES),
    "is_active": ValidationRule("Active", type="boolean"),
    "is_blocked": ValidationRule("Blocked", type="boolean"),
    "is_approved_for_kuppies": ValidationRule("Approval status", type="boolean"),
}


@router.get("")
async def list_users(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """List users, newest first."""
    users = await ctx.store(crud.list_users(session), "Failed to fetch users")
    return {"users": [u.to_dict() for u in users]}


@router.put("")
async def set_kuppi_approval(
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=APPROVAL_RULES))],
    session: SessionDep,
) -> dict:
    """Grant or revoke a user's permission to publish kuppis."""
    user = await ctx.store(
        crud.set_kuppi_approval(session, ctx.data["id"], ctx.data["is_approved_for_kuppies"]),
        "Failed to update user",
    )
    if user is None:
        raise NotFoundError("User")
    return {"user": user.to_dict()}


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    ensure_uuid(user_id, "user")
    user = await ctx.store(crud.get_user_by_id(session, user_id), "Failed to fetch user")
    if user is None:
        raise NotFoundError("User")
    return {"user": user.to_dict()}


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=UPDATE_USER_RULES))],
    session: SessionDep,
) -> dict:
    ensure_uuid(user_id, "user")
    if not ctx.data:
        raise BadRequestError("No valid fields to update")

    user = await ctx.store(
        crud.update_user(session, user_id, ctx.data),
        "Failed to update user",
    )
    if user is None:
        raise NotFoundError("User")
    return {"user": user.to_dict()}


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("delete"))],
    session: SessionDep,
) -> dict:
    ensure_uuid(user_id, "user")
    await ctx.store(crud.delete_user(session, user_id), "Failed to delete user")
    return {"success": True}
