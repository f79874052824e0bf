"""Class groups - administration CRUD."""
from datetime import datetime

from fastapi import APIRouter, HTTPException

from app.api.common import get_or_404, matches
from app.api.deps import AdminOnly
from app.models.class_group import SHIFT_LABELS, ClassGroup, ClassGroupCreate, ClassGroupUpdate, Shift
from app.models.program import Program
from app.models.user import User, UserRole
from app.services.reference_index import ReferenceIndex
from app.services.snapshot import cache, get_snapshot

router = APIRouter()


def serialize_group(g, index: ReferenceIndex | None = None) -> dict:
    out = {
        "id": str(g.id),
        "name": g.name,
        "program_id": g.program_id,
        "teacher_id": g.teacher_id,
        "shift": g.shift.value,
        "shift_label": SHIFT_LABELS[g.shift],
        "semester": g.semester,
        "year": g.year,
        "is_active": g.is_active,
    }
    if index is not None:
        program = index.programs.get(g.program_id)
        school = index.schools.get(program.school_id) if program else None
        out.update(
            program_name=index.program_name(g.program_id),
            school_name=index.school_name(program.school_id if program else None),
            campus_name=index.campus_name(school.campus_id if school else None),
            teacher_name=index.user_name(g.teacher_id),
            student_count=index.active_student_count(str(g.id)),
        )
    return out


async def _check_program(program_id: str) -> None:
    try:
        await get_or_404(Program, program_id, "Program")
    except HTTPException:
        raise HTTPException(status_code=400, detail="Program does not exist")


async def _check_teacher(teacher_id: str) -> None:
    try:
        teacher = await get_or_404(User, teacher_id, "Teacher")
    except HTTPException:
        raise HTTPException(status_code=400, detail="Teacher does not exist")
    if teacher.role != UserRole.TEACHER:
        raise HTTPException(status_code=400, detail="Assigned user is not a teacher")


@router.get("/")
async def list_groups(
    user: AdminOnly,
    program_id: str | None = None,
    teacher_id: str | None = None,
    shift: Shift | None = None,
    active_only: bool = False,
    q: str | None = None,
):
    snapshot = await get_snapshot("groups", "programs", "schools", "campuses", "users", "students")
    index = ReferenceIndex(snapshot)
    return [
        serialize_group(g, index)
        for g in snapshot.groups
        if (g.is_active or not active_only)
        and (not program_id or g.program_id == program_id)
        and (not teacher_id or g.teacher_id == teacher_id)
        and (shift is None or g.shift == shift)
        and matches(q, g.name, index.program_name(g.program_id), index.user_name(g.teacher_id))
    ]


@router.post("/", status_code=201)
async def create_group(data: ClassGroupCreate, user: AdminOnly):
    await _check_program(data.program_id)
    await _check_teacher(data.teacher_id)
    g = ClassGroup(
        name=data.name.strip(),
        program_id=data.program_id,
        teacher_id=data.teacher_id,
        shift=data.shift,
        semester=data.semester.strip(),
        year=data.year,
        is_active=data.is_active,
    )
    await g.insert()
    cache.invalidate("groups")
    return serialize_group(g)


@router.get("/{group_id}")
async def get_group(group_id: str, user: AdminOnly):
    return serialize_group(await get_or_404(ClassGroup, group_id, "Group"))


@router.patch("/{group_id}")
async def update_group(group_id: str, data: ClassGroupUpdate, user: AdminOnly):
    g = await get_or_404(ClassGroup, group_id, "Group")
    update = data.model_dump(exclude_unset=True)
    if update.get("program_id"):
        await _check_program(update["program_id"])
    if update.get("teacher_id"):
        await _check_teacher(update["teacher_id"])
    for key, value in update.items():
        setattr(g, key, value)
    g.updated_at = datetime.utcnow()
    await g.save()
    cache.invalidate("groups")
    return serialize_group(g)


@router.delete("/{group_id}", status_code=204)
async def delete_group(group_id: str, user: AdminOnly):
    """Hard delete; students and records keep their group reference."""
    g = await get_or_404(ClassGroup, group_id, "Group")
    await g.delete()
    cache.invalidate("groups")
