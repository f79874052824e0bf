from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException

from app.api.deps import AdminOnly, ManagerOrAdmin, TeacherOrAdmin
from app.models.attendance import STATUS_LABELS, AttendanceStatus
from app.models.campus import Campus
from app.models.class_group import SHIFT_LABELS, ClassGroup, Shift
from app.models.program import Program
from app.models.school import School
from app.models.student import Student
from app.models.user import User, UserRole
from app.services.aggregator import count_statuses, preset_range, records_between, shift_breakdown
from app.services.dates import local_today
from app.services.hierarchy import HierarchyFilter, normalize_selection, resolve_group_ids
from app.services.reference_index import ReferenceIndex
from app.services.snapshot import REFERENCE_COLLECTIONS, get_snapshot

router = APIRouter()


@router.get("/admin")
async def get_admin_stats(admin: AdminOnly) -> Dict[str, Any]:
    """Entity counts for the admin dashboard."""
    return {
        "counts": {
            "campuses": await Campus.count(),
            "schools": await School.count(),
            "programs": await Program.count(),
            "groups": await ClassGroup.count(),
            "students": await Student.count(),
            "teachers": await User.find(User.role == UserRole.TEACHER).count(),
        }
    }


@router.get("/manager")
async def get_manager_stats(
    user: ManagerOrAdmin,
    campus_id: Optional[str] = None,
    school_id: Optional[str] = None,
    program_id: Optional[str] = None,
    shift: Optional[str] = None,
    date_range: str = "week",
) -> Dict[str, Any]:
    shift = normalize_selection(shift)
    try:
        selected_shift = Shift(shift) if shift else None
        start, end = preset_range(date_range, local_today())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    snapshot = await get_snapshot(*REFERENCE_COLLECTIONS, "records")
    index = ReferenceIndex(snapshot)
    group_ids = resolve_group_ids(
        index, HierarchyFilter(campus_id=campus_id, school_id=school_id, program_id=program_id)
    )
    if selected_shift is not None:
        group_ids = {gid for gid in group_ids if index.groups[gid].shift == selected_shift}

    records = [r for r in records_between(snapshot.records, start, end) if r.class_group_id in group_ids]
    counts = count_statuses(records)
    values = {
        AttendanceStatus.PRESENT: counts.present,
        AttendanceStatus.ABSENT: counts.absent,
        AttendanceStatus.JUSTIFIED: counts.justified,
    }
    return {
        "start_date": start,
        "end_date": end,
        "total_students": sum(
            1 for s in index.students.values() if s.is_active and s.class_group_id in group_ids
        ),
        "counts": counts,
        "attendance_rate": counts.attendance_rate,
        "pie": [
            {"status": status.value, "label": STATUS_LABELS[status], "value": value}
            for status, value in values.items()
            if value > 0
        ],
        "shifts": shift_breakdown(records, index),
    }


@router.get("/teacher")
async def get_teacher_stats(user: TeacherOrAdmin) -> Dict[str, Any]:
    snapshot = await get_snapshot("groups", "programs", "students")
    index = ReferenceIndex(snapshot)
    groups = [g for g in snapshot.groups if g.is_active and g.teacher_id == str(user.id)]
    items = [
        {
            "id": g.id,
            "name": g.name,
            "program_name": index.program_name(g.program_id),
            "shift": g.shift.value,
            "shift_label": SHIFT_LABELS[g.shift],
            "student_count": index.active_student_count(g.id),
        }
        for g in groups
    ]
    return {
        "groups": items,
        "total_groups": len(items),
        "total_students": sum(item["student_count"] for item in items),
    }
