"""Programs (carreras) - administration CRUD."""
from datetime import datetime

from fastapi import APIRouter, HTTPException

from app.api.common import get_or_404, matches
from app.api.deps import AdminOnly
from app.models.program import Program, ProgramCreate, ProgramUpdate
from app.models.school import School
from app.services.reference_index import ReferenceIndex
from app.services.snapshot import cache, get_snapshot

router = APIRouter()


def serialize_program(p, index: ReferenceIndex | None = None) -> dict:
    out = {
        "id": str(p.id),
        "name": p.name,
        "code": p.code,
        "school_id": p.school_id,
        "is_active": p.is_active,
    }
    if index is not None:
        out["school_name"] = index.school_name(p.school_id)
    return out


async def _check_school(school_id: str) -> None:
    try:
        await get_or_404(School, school_id, "School")
    except HTTPException:
        raise HTTPException(status_code=400, detail="School does not exist")


@router.get("/")
async def list_programs(
    user: AdminOnly,
    school_id: str | None = None,
    active_only: bool = False,
    q: str | None = None,
):
    snapshot = await get_snapshot("programs", "schools")
    index = ReferenceIndex(snapshot)
    return [
        serialize_program(p, index)
        for p in snapshot.programs
        if (p.is_active or not active_only)
        and (not school_id or p.school_id == school_id)
        and matches(q, p.name, p.code, index.school_name(p.school_id))
    ]


@router.post("/", status_code=201)
async def create_program(data: ProgramCreate, user: AdminOnly):
    await _check_school(data.school_id)
    p = Program(
        name=data.name.strip(),
        code=data.code.strip().upper(),
        school_id=data.school_id,
        is_active=data.is_active,
    )
    await p.insert()
    cache.invalidate("programs")
    return serialize_program(p)


@router.get("/{program_id}")
async def get_program(program_id: str, user: AdminOnly):
    return serialize_program(await get_or_404(Program, program_id, "Program"))


@router.patch("/{program_id}")
async def update_program(program_id: str, data: ProgramUpdate, user: AdminOnly):
    p = await get_or_404(Program, program_id, "Program")
    update = data.model_dump(exclude_unset=True)
    if update.get("school_id"):
        await _check_school(update["school_id"])
    if update.get("code"):
        update["code"] = update["code"].strip().upper()
    for key, value in update.items():
        setattr(p, key, value)
    p.updated_at = datetime.utcnow()
    await p.save()
    cache.invalidate("programs")
    return serialize_program(p)


@router.delete("/{program_id}", status_code=204)
async def delete_program(program_id: str, user: AdminOnly):
    p = await get_or_404(Program, program_id, "Program")
    await p.delete()
    cache.invalidate("programs")
