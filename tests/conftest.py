from __future__ import annotations

import os

# Settings refuse the placeholder JWT secret outside debug mode.
os.environ.setdefault("DEBUG", "true")

import pytest

from app.models.attendance import AttendanceStatus
from app.models.class_group import Shift
from app.models.snapshot import (
    CampusRow,
    GroupRow,
    JustificationRow,
    ProgramRow,
    SchoolRow,
    Snapshot,
    StudentRow,
    UserRow,
)
from app.models.user import UserRole
from app.services.reference_index import ReferenceIndex
from tests.factories import record


@pytest.fixture
def snapshot():
    """C1 -> S1 -> P1 -> G1 (morning, students A and B) plus a second branch
    C2 -> S2 -> P2 -> G2 (evening, student C) and an inactive group G3."""
    return Snapshot(
        campuses=[
            CampusRow(id="C1", name="Central"),
            CampusRow(id="C2", name="Norte"),
        ],
        schools=[
            SchoolRow(id="S1", name="Ingeniería", campus_id="C1"),
            SchoolRow(id="S2", name="Derecho", campus_id="C2"),
        ],
        programs=[
            ProgramRow(id="P1", name="Sistemas", code="ISC", school_id="S1"),
            ProgramRow(id="P2", name="Derecho Civil", code="DC", school_id="S2"),
        ],
        groups=[
            GroupRow(id="G1", name="ISC-1A", program_id="P1", teacher_id="T1", shift=Shift.MORNING),
            GroupRow(id="G2", name="DC-3B", program_id="P2", teacher_id="T2", shift=Shift.EVENING),
            GroupRow(
                id="G3", name="ISC-2C", program_id="P1", teacher_id="T1",
                shift=Shift.AFTERNOON, is_active=False,
            ),
        ],
        students=[
            StudentRow(id="A", student_number="2024001", first_name="Ana", last_name="Zamora", class_group_id="G1"),
            StudentRow(id="B", student_number="2024002", first_name="Bruno", last_name="Alvarez", class_group_id="G1"),
            StudentRow(id="C", student_number="2024003", first_name="Carla", last_name="Ruiz", class_group_id="G2"),
            StudentRow(
                id="D", student_number="2024004", first_name="Diego", last_name="Mora",
                class_group_id="G1", is_active=False,
            ),
        ],
        users=[
            UserRow(id="T1", email="t1@uni.edu", display_name="Prof. Torres", role=UserRole.TEACHER),
            UserRow(id="T2", email="t2@uni.edu", display_name="Prof. Vega", role=UserRole.TEACHER),
            UserRow(id="M1", email="m1@uni.edu", display_name="Marta", role=UserRole.AREA_MANAGER),
        ],
        records=[
            record("R1", "A", "G1", "2024-03-01", AttendanceStatus.PRESENT),
            record("R2", "B", "G1", "2024-03-01", AttendanceStatus.ABSENT),
        ],
    )


@pytest.fixture
def index(snapshot):
    return ReferenceIndex(snapshot)


@pytest.fixture
def g2_records():
    return [
        record("R3", "C", "G2", "2024-03-02", AttendanceStatus.JUSTIFIED, teacher_id="T2"),
        record("R4", "C", "G2", "2024-03-01", AttendanceStatus.ABSENT, teacher_id="T2"),
    ]


@pytest.fixture
def justification_row():
    def make(id, record_id, student_id, note="Cita médica", revoked=False):
        return JustificationRow(
            id=id,
            attendance_record_id=record_id,
            student_id=student_id,
            note=note,
            revoked=revoked,
        )

    return make
