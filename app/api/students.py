"""Students - administration CRUD."""
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query

from app.api.common import get_or_404, matches
from app.api.deps import AdminOnly
from app.models.class_group import ClassGroup
from app.models.student import Student, StudentCreate, StudentUpdate
from app.services.reference_index import ReferenceIndex
from app.services.snapshot import cache, get_snapshot

router = APIRouter()


def serialize_student(s, index: ReferenceIndex | None = None) -> dict:
    out = {
        "id": str(s.id),
        "student_number": s.student_number,
        "first_name": s.first_name,
        "last_name": s.last_name,
        "full_name": s.full_name,
        "class_group_id": s.class_group_id,
        "is_active": s.is_active,
    }
    # Rows from the snapshot do not carry contact details.
    for field in ("email", "phone"):
        if hasattr(s, field):
            out[field] = getattr(s, field)
    if index is not None:
        out["group_name"] = index.group_name(s.class_group_id)
    return out


async def _check_group(group_id: str) -> None:
    try:
        await get_or_404(ClassGroup, group_id, "Group")
    except HTTPException:
        raise HTTPException(status_code=400, detail="Group does not exist")


@router.get("/")
async def list_students(
    user: AdminOnly,
    class_group_id: str | None = None,
    active_only: bool = False,
    q: str | None = Query(None, description="Search by name, student number or group"),
):
    snapshot = await get_snapshot("students", "groups")
    index = ReferenceIndex(snapshot)
    students = [
        s for s in snapshot.students
        if (s.is_active or not active_only)
        and (not class_group_id or s.class_group_id == class_group_id)
        and matches(q, s.full_name, s.student_number, index.group_name(s.class_group_id))
    ]
    students.sort(key=lambda s: (s.last_name.lower(), s.first_name.lower()))
    return [serialize_student(s, index) for s in students]


@router.post("/", status_code=201)
async def create_student(data: StudentCreate, user: AdminOnly):
    await _check_group(data.class_group_id)
    s = Student(
        student_number=data.student_number.strip(),
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=data.email,
        phone=(data.phone or "").strip() or None,
        class_group_id=data.class_group_id,
        is_active=data.is_active,
    )
    await s.insert()
    cache.invalidate("students")
    return serialize_student(s)


@router.get("/{student_id}")
async def get_student(student_id: str, user: AdminOnly):
    return serialize_student(await get_or_404(Student, student_id, "Student"))


@router.patch("/{student_id}")
async def update_student(student_id: str, data: StudentUpdate, user: AdminOnly):
    s = await get_or_404(Student, student_id, "Student")
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("class_group_id"):
        await _check_group(update_data["class_group_id"])
    for key, value in update_data.items():
        setattr(s, key, value)
    s.updated_at = datetime.utcnow()
    await s.save()
    cache.invalidate("students")
    return serialize_student(s)


@router.delete("/{student_id}", status_code=204)
async def delete_student(student_id: str, user: AdminOnly):
    """Hard delete; attendance records keep the student id and show a placeholder."""
    s = await get_or_404(Student, student_id, "Student")
    await s.delete()
    cache.invalidate("students")
