"""Identifier lookups over a snapshot and display-name resolution."""
from __future__ import annotations

from typing import Optional

from app.models.snapshot import (
    CampusRow,
    GroupRow,
    ProgramRow,
    SchoolRow,
    Snapshot,
    StudentRow,
    UserRow,
)

PLACEHOLDER = "—"


class ReferenceIndex:
    """Read-only id -> row maps, rebuilt whenever the snapshot changes."""

    def __init__(self, snapshot: Snapshot):
        self.campuses: dict[str, CampusRow] = {c.id: c for c in snapshot.campuses}
        self.schools: dict[str, SchoolRow] = {s.id: s for s in snapshot.schools}
        self.programs: dict[str, ProgramRow] = {p.id: p for p in snapshot.programs}
        self.groups: dict[str, GroupRow] = {g.id: g for g in snapshot.groups}
        self.students: dict[str, StudentRow] = {s.id: s for s in snapshot.students}
        self.users: dict[str, UserRow] = {u.id: u for u in snapshot.users}

    def campus_name(self, campus_id: Optional[str]) -> str:
        campus = self.campuses.get(campus_id) if campus_id else None
        return campus.name if campus else PLACEHOLDER

    def school_name(self, school_id: Optional[str]) -> str:
        school = self.schools.get(school_id) if school_id else None
        return school.name if school else PLACEHOLDER

    def program_name(self, program_id: Optional[str]) -> str:
        program = self.programs.get(program_id) if program_id else None
        return program.name if program else PLACEHOLDER

    def group_name(self, group_id: Optional[str]) -> str:
        group = self.groups.get(group_id) if group_id else None
        return group.name if group else PLACEHOLDER

    def user_name(self, user_id: Optional[str]) -> str:
        user = self.users.get(user_id) if user_id else None
        return user.display_name if user else PLACEHOLDER

    def student_name(self, student_id: Optional[str]) -> str:
        student = self.students.get(student_id) if student_id else None
        return student.full_name if student else PLACEHOLDER

    def student_number(self, student_id: Optional[str]) -> str:
        student = self.students.get(student_id) if student_id else None
        return student.student_number if student else PLACEHOLDER

    def program_of_group(self, group_id: Optional[str]) -> Optional[ProgramRow]:
        group = self.groups.get(group_id) if group_id else None
        if not group:
            return None
        return self.programs.get(group.program_id)

    def active_student_count(self, group_id: str) -> int:
        return sum(1 for s in self.students.values() if s.class_group_id == group_id and s.is_active)
