"""Absence justifications with optional supporting document."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field


class Justification(Document):
    attendance_record_id: Indexed(str)
    student_id: str
    note: str
    document_url: Optional[str] = None
    document_name: Optional[str] = None
    document_key: Optional[str] = None  # object store key
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    # A revoked justification stays as an audit trail but no longer
    # accounts for the record's status.
    revoked: bool = False
    revoked_at: Optional[datetime] = None
    revoked_by: Optional[str] = None
    revoked_reason: Optional[str] = None
    created_by: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "justifications"
        use_state_management = True
