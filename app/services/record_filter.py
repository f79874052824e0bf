"""Attendance record filtering and display join for report views."""
from __future__ import annotations

from typing import Iterable, Optional

from pydantic import field_validator

from app.models.attendance import AttendanceStatus, validate_iso_date
from app.models.class_group import Shift
from app.models.snapshot import EnrichedAttendanceRecord, RecordRow
from app.services.hierarchy import HierarchyFilter, normalize_selection, resolve_group_ids
from app.services.reference_index import ReferenceIndex

DEFAULT_RESULT_CAP = 100


class ReportFilters(HierarchyFilter):
    teacher_id: Optional[str] = None
    shift: Optional[Shift] = None
    status: Optional[AttendanceStatus] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    search: Optional[str] = None

    @field_validator("teacher_id", "shift", "status", mode="before")
    @classmethod
    def _normalize_choice(cls, value):
        if isinstance(value, str):
            value = normalize_selection(value)
            return None if value == "any" else value
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return validate_iso_date(value.strip())

    @field_validator("search", mode="before")
    @classmethod
    def _normalize_search(cls, value):
        if value is None:
            return None
        value = value.strip()
        return value or None


def filter_records(
    records: Iterable[RecordRow],
    group_ids: set[str],
    index: ReferenceIndex,
    filters: ReportFilters,
) -> list[RecordRow]:
    """Apply the structural filters, keeping input order."""
    out = []
    for record in records:
        if record.class_group_id not in group_ids:
            continue
        if filters.teacher_id is not None and record.teacher_id != filters.teacher_id:
            continue
        if filters.status is not None and record.status != filters.status:
            continue
        if filters.start_date is not None and record.date < filters.start_date:
            continue
        if filters.end_date is not None and record.date > filters.end_date:
            continue
        if filters.shift is not None:
            group = index.groups.get(record.class_group_id)
            if not group or group.shift != filters.shift:
                continue
        out.append(record)
    return out


def enrich_record(record: RecordRow, index: ReferenceIndex) -> EnrichedAttendanceRecord:
    group = index.groups.get(record.class_group_id)
    return EnrichedAttendanceRecord(
        **record.model_dump(),
        student_name=index.student_name(record.student_id),
        student_number=index.student_number(record.student_id),
        group_name=index.group_name(record.class_group_id),
        program_name=index.program_name(group.program_id if group else None),
        teacher_name=index.user_name(record.teacher_id),
    )


def matches_search(record: EnrichedAttendanceRecord, term: str) -> bool:
    needle = term.lower()
    return any(
        needle in field.lower()
        for field in (record.student_name, record.student_number, record.group_name)
    )


def query_records(
    records: Iterable[RecordRow],
    index: ReferenceIndex,
    filters: ReportFilters,
) -> list[EnrichedAttendanceRecord]:
    """Full filtered, joined and date-descending result (not capped)."""
    group_ids = resolve_group_ids(index, filters)
    matched = [enrich_record(r, index) for r in filter_records(records, group_ids, index, filters)]
    if filters.search:
        matched = [r for r in matched if matches_search(r, filters.search)]
    # list.sort is stable with reverse=True, so same-day rows keep input order
    matched.sort(key=lambda r: r.date, reverse=True)
    return matched


def cap_results(rows: list, limit: int = DEFAULT_RESULT_CAP) -> list:
    return rows[:limit] if limit > 0 else list(rows)
