"""Take attendance: teacher groups, daily roster and bulk marking."""
from fastapi import APIRouter, HTTPException

from app.api.common import get_or_404
from app.api.deps import TeacherOrAdmin, is_admin
from app.models.attendance import AttendanceBulkMarkRequest, AttendanceRecord, validate_iso_date
from app.models.class_group import SHIFT_LABELS, ClassGroup
from app.models.snapshot import RecordRow, StudentRow
from app.models.student import Student
from app.models.user import User
from app.services.attendance import build_roster, commit_attendance, plan_attendance, roster_stats
from app.services.dates import local_today
from app.services.reference_index import ReferenceIndex
from app.services.snapshot import cache, get_snapshot

router = APIRouter()


def ensure_group_access(user: User, group) -> None:
    if is_admin(user):
        return
    if group.teacher_id != str(user.id):
        raise HTTPException(status_code=403, detail="You are not assigned to this group")


def _parse_date(date_str: str) -> str:
    try:
        return validate_iso_date(date_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format (YYYY-MM-DD)")


@router.get("/groups")
async def get_groups(user: TeacherOrAdmin):
    """Active groups taught by the caller, or every active group for admins."""
    snapshot = await get_snapshot("groups", "programs", "students")
    index = ReferenceIndex(snapshot)
    groups = [
        g for g in snapshot.groups
        if g.is_active and (is_admin(user) or g.teacher_id == str(user.id))
    ]
    return [
        {
            "id": g.id,
            "name": g.name,
            "program_id": g.program_id,
            "program_name": index.program_name(g.program_id),
            "shift": g.shift.value,
            "shift_label": SHIFT_LABELS[g.shift],
            "semester": g.semester,
            "year": g.year,
            "student_count": index.active_student_count(g.id),
        }
        for g in groups
    ]


@router.get("/roster/{group_id}/{date_str}")
async def get_roster(group_id: str, date_str: str, user: TeacherOrAdmin):
    """Active students of a group with their status on that date (default present)."""
    date_str = _parse_date(date_str)
    group = await get_or_404(ClassGroup, group_id, "Group")
    ensure_group_access(user, group)

    students = await Student.find({"class_group_id": group_id, "is_active": True}).to_list()
    records = await AttendanceRecord.find({"class_group_id": group_id, "date": date_str}).to_list()
    roster = build_roster(
        [StudentRow.model_validate(s) for s in students],
        [RecordRow.model_validate(r) for r in records],
    )
    return {
        "class_group_id": group_id,
        "group_name": group.name,
        "shift": group.shift.value,
        "date": date_str,
        "is_today": date_str == local_today().isoformat(),
        "already_taken": bool(records),
        "students": roster,
        "stats": roster_stats(roster),
    }


@router.post("/mark-bulk")
async def mark_attendance_bulk(data: AttendanceBulkMarkRequest, user: TeacherOrAdmin):
    """Save one group's attendance for one date as a single batch."""
    group = await get_or_404(ClassGroup, data.class_group_id, "Group")
    ensure_group_access(user, group)

    students = await Student.find({"class_group_id": data.class_group_id, "is_active": True}).to_list()
    existing = await AttendanceRecord.find(
        {"class_group_id": data.class_group_id, "date": data.date}
    ).to_list()
    try:
        plan = plan_attendance(
            class_group_id=data.class_group_id,
            date=data.date,
            teacher_id=str(user.id),
            marks=data.attendance,
            roster_student_ids={str(s.id) for s in students},
            existing=[RecordRow.model_validate(r) for r in existing],
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await commit_attendance(plan)
    cache.invalidate("records")
    if plan.unjustified_record_ids:
        cache.invalidate("justifications")

    return {
        "status": "success",
        "message": f"Attendance saved for {len(data.attendance)} students",
        "inserted": len(plan.inserts),
        "updated": len(plan.updates),
        "unchanged": len(plan.unchanged),
        "revoked_justifications": len(plan.unjustified_record_ids),
    }
