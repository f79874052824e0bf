"""Campuses (recintos) - administration CRUD."""
from datetime import datetime

from fastapi import APIRouter

from app.api.common import get_or_404, matches
from app.api.deps import AdminOnly
from app.models.campus import Campus, CampusCreate, CampusUpdate
from app.services.snapshot import cache, get_snapshot

router = APIRouter()


def serialize_campus(c) -> dict:
    return {
        "id": str(c.id),
        "name": c.name,
        "address": c.address,
        "is_active": c.is_active,
    }


@router.get("/")
async def list_campuses(user: AdminOnly, active_only: bool = False, q: str | None = None):
    snapshot = await get_snapshot("campuses")
    return [
        serialize_campus(c)
        for c in snapshot.campuses
        if (c.is_active or not active_only) and matches(q, c.name, c.address)
    ]


@router.post("/", status_code=201)
async def create_campus(data: CampusCreate, user: AdminOnly):
    c = Campus(name=data.name.strip(), address=(data.address or "").strip() or None, is_active=data.is_active)
    await c.insert()
    cache.invalidate("campuses")
    return serialize_campus(c)


@router.get("/{campus_id}")
async def get_campus(campus_id: str, user: AdminOnly):
    return serialize_campus(await get_or_404(Campus, campus_id, "Campus"))


@router.patch("/{campus_id}")
async def update_campus(campus_id: str, data: CampusUpdate, user: AdminOnly):
    c = await get_or_404(Campus, campus_id, "Campus")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(c, key, value)
    c.updated_at = datetime.utcnow()
    await c.save()
    cache.invalidate("campuses")
    return serialize_campus(c)


@router.delete("/{campus_id}", status_code=204)
async def delete_campus(campus_id: str, user: AdminOnly):
    """Hard delete; schools that pointed here keep their dangling reference."""
    c = await get_or_404(Campus, campus_id, "Campus")
    await c.delete()
    cache.invalidate("campuses")
