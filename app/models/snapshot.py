"""Immutable read models used by reporting.

Rows are detached copies of the stored documents so the reporting
functions never touch the database and can be built directly in tests.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.attendance import AttendanceStatus
from app.models.class_group import Shift
from app.models.user import UserRole


class _Row(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True, extra="ignore")

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        return str(value)


class CampusRow(_Row):
    name: str
    address: Optional[str] = None
    is_active: bool = True


class SchoolRow(_Row):
    name: str
    campus_id: str
    is_active: bool = True


class ProgramRow(_Row):
    name: str
    code: str = ""
    school_id: str
    is_active: bool = True


class GroupRow(_Row):
    name: str
    program_id: str
    teacher_id: str
    shift: Shift
    semester: str = ""
    year: int = 0
    is_active: bool = True


class StudentRow(_Row):
    student_number: str
    first_name: str
    last_name: str
    class_group_id: str
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserRow(_Row):
    email: str
    display_name: str
    role: UserRole
    is_active: bool = True


class RecordRow(_Row):
    student_id: str
    class_group_id: str
    teacher_id: str
    date: str
    status: AttendanceStatus


class JustificationRow(_Row):
    attendance_record_id: str
    student_id: str
    note: str
    document_url: Optional[str] = None
    document_name: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    revoked: bool = False
    created_at: Optional[datetime] = None


class Snapshot(BaseModel):
    """Collections fetched together; every derived view reads one snapshot."""
    model_config = ConfigDict(frozen=True)

    campuses: list[CampusRow] = Field(default_factory=list)
    schools: list[SchoolRow] = Field(default_factory=list)
    programs: list[ProgramRow] = Field(default_factory=list)
    groups: list[GroupRow] = Field(default_factory=list)
    students: list[StudentRow] = Field(default_factory=list)
    users: list[UserRow] = Field(default_factory=list)
    records: list[RecordRow] = Field(default_factory=list)
    justifications: list[JustificationRow] = Field(default_factory=list)


class EnrichedAttendanceRecord(RecordRow):
    """Attendance record joined with its display names."""
    student_name: str
    student_number: str
    group_name: str
    program_name: str
    teacher_name: str
