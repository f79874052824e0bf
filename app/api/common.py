"""Helpers shared by the CRUD routers."""
from typing import Optional, Type, TypeVar

from beanie import Document, PydanticObjectId
from bson.errors import InvalidId
from fastapi import HTTPException

D = TypeVar("D", bound=Document)


async def get_or_404(model: Type[D], document_id: str, label: str) -> D:
    try:
        oid = PydanticObjectId(document_id)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=404, detail=f"{label} not found")
    document = await model.get(oid)
    if not document:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return document


def matches(term: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring search over display fields."""
    if not term or not term.strip():
        return True
    needle = term.strip().lower()
    return any(needle in (f or "").lower() for f in fields)
