"""Schools (escuelas) - administration CRUD."""
from datetime import datetime

from fastapi import APIRouter, HTTPException

from app.api.common import get_or_404, matches
from app.api.deps import AdminOnly
from app.models.campus import Campus
from app.models.school import School, SchoolCreate, SchoolUpdate
from app.services.reference_index import ReferenceIndex
from app.services.snapshot import cache, get_snapshot

router = APIRouter()


def serialize_school(s, index: ReferenceIndex | None = None) -> dict:
    out = {
        "id": str(s.id),
        "name": s.name,
        "campus_id": s.campus_id,
        "is_active": s.is_active,
    }
    if index is not None:
        out["campus_name"] = index.campus_name(s.campus_id)
    return out


async def _check_campus(campus_id: str) -> None:
    try:
        await get_or_404(Campus, campus_id, "Campus")
    except HTTPException:
        raise HTTPException(status_code=400, detail="Campus does not exist")


@router.get("/")
async def list_schools(
    user: AdminOnly,
    campus_id: str | None = None,
    active_only: bool = False,
    q: str | None = None,
):
    snapshot = await get_snapshot("schools", "campuses")
    index = ReferenceIndex(snapshot)
    return [
        serialize_school(s, index)
        for s in snapshot.schools
        if (s.is_active or not active_only)
        and (not campus_id or s.campus_id == campus_id)
        and matches(q, s.name, index.campus_name(s.campus_id))
    ]


@router.post("/", status_code=201)
async def create_school(data: SchoolCreate, user: AdminOnly):
    await _check_campus(data.campus_id)
    s = School(name=data.name.strip(), campus_id=data.campus_id, is_active=data.is_active)
    await s.insert()
    cache.invalidate("schools")
    return serialize_school(s)


@router.get("/{school_id}")
async def get_school(school_id: str, user: AdminOnly):
    return serialize_school(await get_or_404(School, school_id, "School"))


@router.patch("/{school_id}")
async def update_school(school_id: str, data: SchoolUpdate, user: AdminOnly):
    s = await get_or_404(School, school_id, "School")
    update = data.model_dump(exclude_unset=True)
    if update.get("campus_id"):
        await _check_campus(update["campus_id"])
    for key, value in update.items():
        setattr(s, key, value)
    s.updated_at = datetime.utcnow()
    await s.save()
    cache.invalidate("schools")
    return serialize_school(s)


@router.delete("/{school_id}", status_code=204)
async def delete_school(school_id: str, user: AdminOnly):
    s = await get_or_404(School, school_id, "School")
    await s.delete()
    cache.invalidate("schools")
