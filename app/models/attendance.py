from datetime import date, datetime
from enum import Enum

from beanie import Document
from pydantic import BaseModel, Field, field_validator
import pymongo


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    JUSTIFIED = "justified"


STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Presente",
    AttendanceStatus.ABSENT: "Ausente",
    AttendanceStatus.JUSTIFIED: "Justificado",
}


def validate_iso_date(value: str) -> str:
    """Accept only calendar dates written as YYYY-MM-DD."""
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError("Invalid date format (YYYY-MM-DD)")
    if parsed.isoformat() != value:
        raise ValueError("Invalid date format (YYYY-MM-DD)")
    return value


class AttendanceRecord(Document):
    """One student's status in one class group on one calendar day."""
    student_id: str
    class_group_id: str
    teacher_id: str  # user who took the attendance
    date: str  # YYYY-MM-DD, compared lexicographically
    status: AttendanceStatus = AttendanceStatus.PRESENT
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendance_records"
        use_state_management = True
        indexes = [
            [
                ("class_group_id", pymongo.ASCENDING),
                ("date", pymongo.ASCENDING),
                ("student_id", pymongo.ASCENDING),
            ],
            "teacher_id",
            "date",
        ]


class AttendanceMark(BaseModel):
    student_id: str
    status: AttendanceStatus = AttendanceStatus.PRESENT


class AttendanceBulkMarkRequest(BaseModel):
    class_group_id: str = Field(min_length=1)
    date: str
    attendance: list[AttendanceMark] = Field(min_length=1)

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        return validate_iso_date(value)
