"""Absence justifications with optional supporting documents."""
import logging
from datetime import datetime
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from pymongo.errors import PyMongoError

from app.api.attendance import ensure_group_access
from app.api.common import get_or_404
from app.api.deps import CurrentUser, ManagerOrAdmin, TeacherOrAdmin
from app.config import settings
from app.models.attendance import AttendanceRecord, AttendanceStatus
from app.models.class_group import ClassGroup
from app.models.justification import Justification
from app.models.user import User, UserRole
from app.services.justifications import (
    check_document,
    enrich_justifications,
    file_justification,
    pending_absences,
    revoke_justification,
    search_justifications,
)
from app.services.reference_index import ReferenceIndex
from app.services.s3 import delete_justification_document, upload_justification_document
from app.services.snapshot import cache, get_snapshot

logger = logging.getLogger(__name__)

router = APIRouter()


def _visible_group_ids(user: User, index: ReferenceIndex) -> Optional[set[str]]:
    """Teachers only see their own groups; ``None`` means everything."""
    if user.role == UserRole.TEACHER:
        return {g.id for g in index.groups.values() if g.teacher_id == str(user.id)}
    return None


def serialize_justification(j: Justification) -> dict:
    return {
        "id": str(j.id),
        "attendance_record_id": j.attendance_record_id,
        "student_id": j.student_id,
        "note": j.note,
        "document_url": j.document_url,
        "document_name": j.document_name,
        "approved_by": j.approved_by,
        "approved_at": j.approved_at.isoformat() if j.approved_at else None,
        "revoked": j.revoked,
        "revoked_reason": j.revoked_reason,
        "created_at": j.created_at.isoformat(),
    }


@router.get("/")
async def list_justifications(user: CurrentUser, q: str | None = None, include_revoked: bool = True):
    snapshot = await get_snapshot("justifications", "records", "students", "groups")
    index = ReferenceIndex(snapshot)
    justifications = [j for j in snapshot.justifications if include_revoked or not j.revoked]
    views = enrich_justifications(justifications, snapshot.records, index, _visible_group_ids(user, index))
    return search_justifications(views, q)


@router.get("/pending")
async def list_pending_absences(user: CurrentUser, group_id: str | None = None):
    """Absences in the caller's groups that have no active justification."""
    snapshot = await get_snapshot("justifications", "records", "students", "groups")
    index = ReferenceIndex(snapshot)
    group_ids = _visible_group_ids(user, index)
    if group_ids is None:
        group_ids = set(index.groups)
    pending = pending_absences(snapshot.records, snapshot.justifications, group_ids, group_id or None)
    pending.sort(key=lambda r: r.date, reverse=True)
    return [
        {
            "id": r.id,
            "student_id": r.student_id,
            "student_name": index.student_name(r.student_id),
            "student_number": index.student_number(r.student_id),
            "class_group_id": r.class_group_id,
            "group_name": index.group_name(r.class_group_id),
            "date": r.date,
        }
        for r in pending
    ]


@router.post("/", status_code=201)
async def create_justification(
    user: TeacherOrAdmin,
    attendance_record_id: str = Form(...),
    note: str = Form(...),
    file: Optional[UploadFile] = File(None),
):
    """File a justification for an absence; the record becomes ``justified``."""
    if not note.strip():
        raise HTTPException(status_code=400, detail="Select an absence and add a note")
    record = await get_or_404(AttendanceRecord, attendance_record_id, "Attendance record")
    group = await get_or_404(ClassGroup, record.class_group_id, "Group")
    ensure_group_access(user, group)

    active = await Justification.find_one(
        {"attendance_record_id": attendance_record_id, "revoked": False}
    )
    if active:
        raise HTTPException(status_code=400, detail="This absence is already justified")
    if record.status != AttendanceStatus.ABSENT:
        raise HTTPException(status_code=400, detail="Only absences can be justified")

    body = None
    if file is not None and file.filename:
        body = await file.read()
        try:
            check_document(file.filename, len(body), settings.max_justification_file_mb)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    document_url = document_name = document_key = None
    if body is not None:
        try:
            document_url, document_key = await upload_justification_document(
                body, file.filename, file.content_type
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Justification document upload failed: %s", e)
            raise HTTPException(status_code=502, detail="Could not store the document")
        document_name = file.filename

    try:
        justification = await file_justification(
            record,
            note=note,
            created_by=str(user.id),
            document_url=document_url,
            document_name=document_name,
            document_key=document_key,
        )
    except ValueError as e:
        if document_key:
            await delete_justification_document(document_key)
        raise HTTPException(status_code=400, detail=str(e))
    except PyMongoError:
        if document_key:
            await delete_justification_document(document_key)
        raise

    cache.invalidate("justifications", "records")
    return serialize_justification(justification)


@router.patch("/{justification_id}/approve")
async def approve_justification(justification_id: str, user: ManagerOrAdmin):
    j = await get_or_404(Justification, justification_id, "Justification")
    if j.revoked:
        raise HTTPException(status_code=400, detail="Revoked justifications cannot be approved")
    j.approved_by = str(user.id)
    j.approved_at = datetime.utcnow()
    await j.save()
    cache.invalidate("justifications")
    return serialize_justification(j)


@router.delete("/{justification_id}")
async def delete_justification(justification_id: str, user: TeacherOrAdmin):
    """Revoke: the justification is kept as history and the record returns to absent."""
    j = await get_or_404(Justification, justification_id, "Justification")
    if j.revoked:
        raise HTTPException(status_code=400, detail="Justification is already revoked")
    record = await get_or_404(AttendanceRecord, j.attendance_record_id, "Attendance record")
    group = await get_or_404(ClassGroup, record.class_group_id, "Group")
    ensure_group_access(user, group)

    await revoke_justification(j, revoked_by=str(user.id))
    cache.invalidate("justifications", "records")
    return {"status": "success", "message": "Justification revoked"}
