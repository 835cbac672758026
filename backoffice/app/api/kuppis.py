"""Kuppi (tutorial video) management."""
from dataclasses import replace
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends

from backoffice.app.api.gate import GateContext, RequestGate, ensure_uuid
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.exceptions import BadRequestError, NotFoundError
from backoffice.app.services.validation import PATTERNS, ValidationRule

router = APIRouter()

LANGUAGE_CODES = ("si", "en", "ta")
MAX_LINKS = 20

KUPPI_MODULE = ValidationRule("Module ID", type="string", pattern=PATTERNS["UUID"])
KUPPI_TITLE = ValidationRule("Title", type="string", min_length=1, max_length=300)
KUPPI_YOUTUBE_LINKS = ValidationRule("YouTube links", type="array", min_length=1, max_length=MAX_LINKS)

KUPPI_OPTIONAL_FIELDS = {
    "description": ValidationRule("Description", type="string", max_length=5000),
    "telegram_links": ValidationRule("Telegram links", type="array", max_length=MAX_LINKS),
    "material_urls": ValidationRule("Material URLs", type="array", max_length=MAX_LINKS),
    "language_code": ValidationRule("Language code", type="string", enum=LANGUAGE_CODES),
}

CREATE_KUPPI_RULES = {
    "module_id": replace(KUPPI_MODULE, required=True),
    "title": replace(KUPPI_TITLE, required=True),
    "youtube_links": replace(KUPPI_YOUTUBE_LINKS, required=True),
    "student_id": ValidationRule("Student ID", type="string", pattern=PATTERNS["UUID"]),
    **KUPPI_OPTIONAL_FIELDS,
}

# Only these columns may be changed through PATCH
UPDATE_KUPPI_RULES = {
    "module_id": KUPPI_MODULE,
    "title": KUPPI_TITLE,
    "youtube_links": KUPPI_YOUTUBE_LINKS,
    "is_approved": ValidationRule("Approved", type="boolean"),
    "is_hidden": ValidationRule("Hidden", type="boolean"),
    **KUPPI_OPTIONAL_FIELDS,
}


def _check_youtube_links(data: Dict[str, Any]) -> None:
    links = data.get("youtube_links")
    if links is None:
        return
    for link in links:
        if not isinstance(link, str) or not PATTERNS["YOUTUBE_URL"].match(link):
            raise BadRequestError("YouTube links must be valid YouTube URLs")


@router.get("")
async def list_kuppis(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """List kuppis with module and tutor, newest first."""
    kuppis = await ctx.store(crud.list_kuppis(session), "Failed to fetch kuppis")
    return {"kuppis": [crud.kuppi_to_dict(k) for k in kuppis]}


@router.post("")
async def create_kuppi(
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=CREATE_KUPPI_RULES))],
    session: SessionDep,
) -> dict:
    """Create a kuppi. New kuppis wait for approval."""
    _check_youtube_links(ctx.data)
    kuppi = await ctx.store(
        crud.create_kuppi(session, **ctx.data),
        "Failed to create kuppi",
    )
    return {"kuppi": kuppi.to_dict()}


@router.get("/{kuppi_id}")
async def get_kuppi(
    kuppi_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    ensure_uuid(kuppi_id, "kuppi")
    kuppi = await ctx.store(
        crud.get_kuppi_by_id(session, kuppi_id, with_relations=True),
        "Failed to fetch kuppi",
    )
    if kuppi is None:
        raise NotFoundError("Kuppi")
    return {"kuppi": crud.kuppi_to_dict(kuppi)}


@router.patch("/{kuppi_id}")
async def update_kuppi(
    kuppi_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("write", rules=UPDATE_KUPPI_RULES))],
    session: SessionDep,
) -> dict:
    """Edit a kuppi or change its approval / visibility."""
    ensure_uuid(kuppi_id, "kuppi")
    if not ctx.data:
        raise BadRequestError("No valid fields to update")
    _check_youtube_links(ctx.data)

    kuppi = await ctx.store(
        crud.update_kuppi(session, kuppi_id, ctx.data),
        "Failed to update kuppi",
    )
    if kuppi is None:
        raise NotFoundError("Kuppi")
    return {"kuppi": kuppi.to_dict()}


@router.delete("/{kuppi_id}")
async def delete_kuppi(
    kuppi_id: str,
    ctx: Annotated[GateContext, Depends(RequestGate("delete"))],
    session: SessionDep,
) -> dict:
    ensure_uuid(kuppi_id, "kuppi")
    await ctx.store(crud.delete_kuppi(session, kuppi_id), "Failed to delete kuppi")
    return {"success": True}
