"""Faculty hierarchy document.

The dashboard edits the whole faculty -> department -> semester tree as one
JSON document. Keys are sanitized first, then the document must match the
node schemas below before it replaces the stored copy.
"""
from typing import Annotated, Dict, List, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from backoffice.app.api.gate import GateContext, RequestGate
from backoffice.app.core.logging import get_logger
from backoffice.app.db import crud
from backoffice.app.db.dependencies import SessionDep
from backoffice.app.exceptions import BadRequestError
from backoffice.app.services.validation import sanitize_object

logger = get_logger(__name__)

router = APIRouter()


class SemesterNode(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    order: int = 0
    modules: List[Union[str, int]] = []


class DepartmentNode(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    order: int = 0
    children: Dict[str, SemesterNode] = {}


class FacultyNode(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    order: int = 0
    levels: List[str] = []
    children: Dict[str, DepartmentNode] = {}


HierarchyDocument = TypeAdapter(Dict[str, FacultyNode])


def parse_hierarchy(data: object) -> dict:
    """Validate a hierarchy document and return its normalized form.

    Raises:
        BadRequestError: If the document does not match the node schemas
    """
    try:
        document = HierarchyDocument.validate_python(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise BadRequestError(f"Invalid hierarchy data: {location}: {first['msg']}") from exc
    return HierarchyDocument.dump_python(document)


@router.get("")
async def get_hierarchy(
    ctx: Annotated[GateContext, Depends(RequestGate("read"))],
    session: SessionDep,
) -> dict:
    """Return the current hierarchy document, or null if none is saved."""
    current = await ctx.store(crud.get_current_hierarchy(session), "Failed to fetch hierarchy")
    return {"data": current.data if current else None}


@router.put("")
async def update_hierarchy(
    ctx: Annotated[GateContext, Depends(RequestGate("write", parse_body=True))],
    session: SessionDep,
) -> dict:
    """Replace the hierarchy document."""
    body = sanitize_object(ctx.payload)
    if body.get("data") is None:
        raise BadRequestError("Hierarchy data is required")

    document = parse_hierarchy(body["data"])
    saved = await ctx.store(crud.save_hierarchy(session, document), "Failed to update hierarchy")
    logger.info(f"Hierarchy updated by {ctx.principal.email} ({len(document)} faculties)")
    return {"success": True, "data": saved.data}
