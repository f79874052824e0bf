"""Take-attendance roster and the all-or-nothing save batch."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import UpdateMany, UpdateOne

from app.db import run_batch
from app.models.attendance import AttendanceMark, AttendanceRecord, AttendanceStatus
from app.models.justification import Justification
from app.models.snapshot import RecordRow, StudentRow
from app.services.aggregator import StatusCounts, count_statuses

logger = logging.getLogger(__name__)

REVOKED_BY_STATUS_CHANGE = "status_changed"


class RosterEntry(BaseModel):
    student_id: str
    student_number: str
    first_name: str
    last_name: str
    status: AttendanceStatus
    record_id: Optional[str] = None


def build_roster(students: Iterable[StudentRow], existing: Iterable[RecordRow]) -> list[RosterEntry]:
    """Active students sorted by last name with their recorded (or default) status."""
    by_student = {r.student_id: r for r in existing}
    roster = []
    for student in students:
        if not student.is_active:
            continue
        record = by_student.get(student.id)
        roster.append(
            RosterEntry(
                student_id=student.id,
                student_number=student.student_number,
                first_name=student.first_name,
                last_name=student.last_name,
                status=record.status if record else AttendanceStatus.PRESENT,
                record_id=record.id if record else None,
            )
        )
    roster.sort(key=lambda e: (e.last_name.lower(), e.first_name.lower()))
    return roster


def roster_stats(roster: list[RosterEntry]) -> StatusCounts:
    return count_statuses(roster)


class StatusUpdate(BaseModel):
    record_id: str
    student_id: str
    previous: AttendanceStatus
    status: AttendanceStatus


class AttendancePlan(BaseModel):
    class_group_id: str
    date: str
    teacher_id: str
    inserts: list[AttendanceMark] = Field(default_factory=list)
    updates: list[StatusUpdate] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)

    @property
    def unjustified_record_ids(self) -> list[str]:
        """Records leaving ``justified``; their justifications lose effect."""
        return [
            u.record_id for u in self.updates
            if u.previous == AttendanceStatus.JUSTIFIED and u.status != AttendanceStatus.JUSTIFIED
        ]

    @property
    def write_count(self) -> int:
        return len(self.inserts) + len(self.updates)


def plan_attendance(
    *,
    class_group_id: str,
    date: str,
    teacher_id: str,
    marks: Iterable[AttendanceMark],
    roster_student_ids: set[str],
    existing: Iterable[RecordRow],
) -> AttendancePlan:
    """Work out one write per student, updating the record already stored
    for (student, group, date) when there is one.

    Raises ValueError before anything is written when a mark is invalid.
    """
    marks = list(marks)
    seen: set[str] = set()
    for mark in marks:
        if mark.student_id in seen:
            raise ValueError(f"Student {mark.student_id} appears more than once")
        seen.add(mark.student_id)
        if mark.student_id not in roster_student_ids:
            raise ValueError(f"Student {mark.student_id} is not an active member of this group")

    stored = {
        r.student_id: r for r in existing
        if r.class_group_id == class_group_id and r.date == date
    }
    plan = AttendancePlan(class_group_id=class_group_id, date=date, teacher_id=teacher_id)
    for mark in marks:
        record = stored.get(mark.student_id)
        if record is None:
            plan.inserts.append(mark)
        elif record.status == mark.status:
            plan.unchanged.append(record.id)
        else:
            plan.updates.append(
                StatusUpdate(
                    record_id=record.id,
                    student_id=mark.student_id,
                    previous=record.status,
                    status=mark.status,
                )
            )
    return plan


async def commit_attendance(plan: AttendancePlan) -> None:
    """Persist the plan as a single batch."""
    now = datetime.utcnow()
    record_ops = []
    for update in plan.updates:
        record_ops.append(
            UpdateOne(
                {"_id": PydanticObjectId(update.record_id)},
                {"$set": {"status": update.status.value, "updated_at": now}},
            )
        )
    for mark in plan.inserts:
        # Upsert on the composite key keeps one record per student/group/date
        # even when two saves race.
        record_ops.append(
            UpdateOne(
                {"student_id": mark.student_id, "class_group_id": plan.class_group_id, "date": plan.date},
                {
                    "$set": {"status": mark.status.value, "updated_at": now},
                    "$setOnInsert": {"teacher_id": plan.teacher_id, "created_at": now},
                },
                upsert=True,
            )
        )

    justification_ops = []
    revoked_ids = plan.unjustified_record_ids
    if revoked_ids:
        justification_ops.append(
            UpdateMany(
                {"attendance_record_id": {"$in": revoked_ids}, "revoked": False},
                {
                    "$set": {
                        "revoked": True,
                        "revoked_at": now,
                        "revoked_by": plan.teacher_id,
                        "revoked_reason": REVOKED_BY_STATUS_CHANGE,
                    }
                },
            )
        )

    await run_batch(
        [
            (AttendanceRecord.get_motor_collection(), record_ops),
            (Justification.get_motor_collection(), justification_ops),
        ]
    )
    logger.info(
        "Attendance saved for group %s on %s: %d inserted, %d updated, %d justifications revoked",
        plan.class_group_id,
        plan.date,
        len(plan.inserts),
        len(plan.updates),
        len(revoked_ids),
    )
