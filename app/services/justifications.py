"""Absence justifications: eligibility, listing and the justify/revoke writes."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from beanie import PydanticObjectId
from pydantic import BaseModel
from pymongo import InsertOne, UpdateOne

from app.db import run_batch
from app.models.attendance import AttendanceRecord, AttendanceStatus
from app.models.justification import Justification
from app.models.snapshot import JustificationRow, RecordRow
from app.services.reference_index import PLACEHOLDER, ReferenceIndex

logger = logging.getLogger(__name__)

REVOKED_BY_USER = "revoked"


def justified_status(current: AttendanceStatus) -> AttendanceStatus:
    """Status a record takes when a justification is filed for it."""
    if current != AttendanceStatus.ABSENT:
        raise ValueError("Only absences can be justified")
    return AttendanceStatus.JUSTIFIED


def active_justification_ids(justifications: Iterable[JustificationRow]) -> set[str]:
    """Record ids that currently have a non-revoked justification."""
    return {j.attendance_record_id for j in justifications if not j.revoked}


def pending_absences(
    records: Iterable[RecordRow],
    justifications: Iterable[JustificationRow],
    group_ids: set[str],
    group_id: Optional[str] = None,
) -> list[RecordRow]:
    """Absent records in the given groups still waiting for a justification."""
    covered = active_justification_ids(justifications)
    return [
        r for r in records
        if r.status == AttendanceStatus.ABSENT
        and r.class_group_id in group_ids
        and (group_id is None or r.class_group_id == group_id)
        and r.id not in covered
    ]


class JustificationView(BaseModel):
    id: str
    attendance_record_id: str
    student_id: str
    student_name: str
    student_number: str
    group_name: str
    date: Optional[str] = None
    note: str
    document_url: Optional[str] = None
    document_name: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    revoked: bool = False
    created_at: Optional[datetime] = None


def enrich_justifications(
    justifications: Iterable[JustificationRow],
    records: Iterable[RecordRow],
    index: ReferenceIndex,
    group_ids: Optional[set[str]] = None,
) -> list[JustificationView]:
    """Join justifications with student, group and date.

    When ``group_ids`` is given, only justifications whose record belongs to
    one of those groups are kept.
    """
    records_by_id = {r.id: r for r in records}
    views = []
    for j in justifications:
        record = records_by_id.get(j.attendance_record_id)
        if group_ids is not None and (record is None or record.class_group_id not in group_ids):
            continue
        views.append(
            JustificationView(
                id=j.id,
                attendance_record_id=j.attendance_record_id,
                student_id=j.student_id,
                student_name=index.student_name(j.student_id),
                student_number=index.student_number(j.student_id),
                group_name=index.group_name(record.class_group_id) if record else PLACEHOLDER,
                date=record.date if record else None,
                note=j.note,
                document_url=j.document_url,
                document_name=j.document_name,
                approved_by=j.approved_by,
                approved_at=j.approved_at,
                revoked=j.revoked,
                created_at=j.created_at,
            )
        )
    views.sort(key=lambda v: v.created_at or datetime.min, reverse=True)
    return views


def search_justifications(views: list[JustificationView], term: Optional[str]) -> list[JustificationView]:
    if not term or not term.strip():
        return views
    needle = term.strip().lower()
    return [
        v for v in views
        if needle in v.student_name.lower()
        or needle in v.student_number.lower()
        or needle in v.note.lower()
    ]


def check_document(filename: str, size: int, max_mb: int) -> None:
    if not filename:
        raise ValueError("Document has no file name")
    if size > max_mb * 1024 * 1024:
        raise ValueError(f"Document must not exceed {max_mb}MB")


async def file_justification(
    record: AttendanceRecord,
    *,
    note: str,
    created_by: str,
    document_url: Optional[str] = None,
    document_name: Optional[str] = None,
    document_key: Optional[str] = None,
) -> Justification:
    """Insert the justification and mark its record justified in one batch."""
    note = note.strip()
    if not note:
        raise ValueError("A note is required")
    new_status = justified_status(record.status)

    justification = Justification(
        id=PydanticObjectId(),
        attendance_record_id=str(record.id),
        student_id=record.student_id,
        note=note,
        document_url=document_url,
        document_name=document_name,
        document_key=document_key,
        created_by=created_by,
    )
    now = datetime.utcnow()
    await run_batch(
        [
            (Justification.get_motor_collection(), [InsertOne(justification.model_dump(by_alias=True, exclude={"revision_id"}))]),
            (
                AttendanceRecord.get_motor_collection(),
                [
                    UpdateOne(
                        {"_id": record.id, "status": AttendanceStatus.ABSENT.value},
                        {"$set": {"status": new_status.value, "updated_at": now}},
                    )
                ],
            ),
        ]
    )
    logger.info("Justification %s filed for record %s", justification.id, record.id)
    return justification


async def revoke_justification(justification: Justification, *, revoked_by: str) -> None:
    """Flag the justification revoked and return its record to ``absent``.

    The document stays stored as an audit trail.
    """
    now = datetime.utcnow()
    await run_batch(
        [
            (
                Justification.get_motor_collection(),
                [
                    UpdateOne(
                        {"_id": justification.id},
                        {
                            "$set": {
                                "revoked": True,
                                "revoked_at": now,
                                "revoked_by": revoked_by,
                                "revoked_reason": REVOKED_BY_USER,
                            }
                        },
                    )
                ],
            ),
            (
                AttendanceRecord.get_motor_collection(),
                [
                    UpdateOne(
                        {
                            "_id": PydanticObjectId(justification.attendance_record_id),
                            "status": AttendanceStatus.JUSTIFIED.value,
                        },
                        {"$set": {"status": AttendanceStatus.ABSENT.value, "updated_at": now}},
                    )
                ],
            ),
        ]
    )
    logger.info("Justification %s revoked by %s", justification.id, revoked_by)
