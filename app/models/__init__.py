"""Beanie document models and Pydantic schemas."""
from app.models.user import User, UserRole, UserCreate, UserUpdate, ROLE_LABELS
from app.models.campus import Campus, CampusCreate, CampusUpdate
from app.models.school import School, SchoolCreate, SchoolUpdate
from app.models.program import Program, ProgramCreate, ProgramUpdate
from app.models.class_group import ClassGroup, ClassGroupCreate, ClassGroupUpdate, Shift, SHIFT_LABELS
from app.models.student import Student, StudentCreate, StudentUpdate
from app.models.attendance import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceMark,
    AttendanceBulkMarkRequest,
    STATUS_LABELS,
)
from app.models.justification import Justification

__all__ = [
    "User",
    "UserRole",
    "UserCreate",
    "UserUpdate",
    "ROLE_LABELS",
    "Campus",
    "CampusCreate",
    "CampusUpdate",
    "School",
    "SchoolCreate",
    "SchoolUpdate",
    "Program",
    "ProgramCreate",
    "ProgramUpdate",
    "ClassGroup",
    "ClassGroupCreate",
    "ClassGroupUpdate",
    "Shift",
    "SHIFT_LABELS",
    "Student",
    "StudentCreate",
    "StudentUpdate",
    "AttendanceRecord",
    "AttendanceStatus",
    "AttendanceMark",
    "AttendanceBulkMarkRequest",
    "STATUS_LABELS",
    "Justification",
]
