"""Attendance statistics over an already filtered set of records.

Everything here is a pure function of its arguments. Justified absences
count toward the attendance rate exactly like presences.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, computed_field

from app.models.attendance import AttendanceStatus
from app.models.class_group import SHIFT_LABELS, Shift
from app.models.snapshot import RecordRow
from app.services.reference_index import PLACEHOLDER, ReferenceIndex

DATE_PRESETS = {"today": 1, "week": 7, "month": 30}


def attendance_rate(present: int, justified: int, total: int) -> int:
    """round(100 * (present + justified) / total), halves rounded up; 0 when empty."""
    if total <= 0:
        return 0
    return (200 * (present + justified) + total) // (2 * total)


def _rounded_mean(values: list[int]) -> int:
    if not values:
        return 0
    return (2 * sum(values) + len(values)) // (2 * len(values))


class StatusCounts(BaseModel):
    present: int = 0
    absent: int = 0
    justified: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return self.present + self.absent + self.justified

    @computed_field
    @property
    def attendance_rate(self) -> int:
        return attendance_rate(self.present, self.justified, self.total)


def count_statuses(records: Iterable[RecordRow]) -> StatusCounts:
    tally = {status: 0 for status in AttendanceStatus}
    for record in records:
        tally[record.status] += 1
    return StatusCounts(
        present=tally[AttendanceStatus.PRESENT],
        absent=tally[AttendanceStatus.ABSENT],
        justified=tally[AttendanceStatus.JUSTIFIED],
    )


def preset_days(preset: str) -> int:
    try:
        return DATE_PRESETS[preset]
    except KeyError:
        raise ValueError(f"Unknown date range: {preset}")


def trailing_range(days: int, today: date) -> tuple[date, date]:
    """``days`` calendar days ending on ``today`` inclusive."""
    if days < 1:
        raise ValueError("Date range must cover at least one day")
    return today - timedelta(days=days - 1), today


def preset_range(preset: str, today: date) -> tuple[str, str]:
    start, end = trailing_range(preset_days(preset), today)
    return start.isoformat(), end.isoformat()


def records_between(records: Iterable[RecordRow], start: str, end: str) -> list[RecordRow]:
    return [r for r in records if start <= r.date <= end]


class TrendPoint(BaseModel):
    date: str
    present: int
    total: int

    @computed_field
    @property
    def attendance_rate(self) -> int:
        # present already includes justified records
        return attendance_rate(self.present, 0, self.total)


def daily_trend(records: Iterable[RecordRow], days: int, today: date) -> list[TrendPoint]:
    """One point per calendar day in range, zero-filled for empty days."""
    start, _ = trailing_range(days, today)
    buckets: dict[str, list[int]] = {}
    for offset in range(days):
        buckets[(start + timedelta(days=offset)).isoformat()] = [0, 0]
    for record in records:
        bucket = buckets.get(record.date)
        if bucket is None:
            continue
        bucket[1] += 1
        if record.status != AttendanceStatus.ABSENT:
            bucket[0] += 1
    return [TrendPoint(date=day, present=p, total=t) for day, (p, t) in buckets.items()]


class BreakdownRow(StatusCounts):
    key: str
    name: str


def breakdown(
    records: Iterable[RecordRow],
    key_of: Callable[[RecordRow], Optional[str]],
    name_of: Callable[[str], str],
    keys: Optional[Iterable[str]] = None,
    include_empty: bool = False,
) -> list[BreakdownRow]:
    """Group records by one dimension and rank by attendance rate.

    ``keys`` fixes the initial order (and the rows kept when
    ``include_empty``); ties keep that order.
    """
    tallies: dict[str, dict[AttendanceStatus, int]] = {}
    for key in keys or ():
        tallies.setdefault(key, {status: 0 for status in AttendanceStatus})
    for record in records:
        key = key_of(record)
        if key is None:
            continue
        if key not in tallies:
            if keys is not None:
                continue
            tallies[key] = {status: 0 for status in AttendanceStatus}
        tallies[key][record.status] += 1

    rows = [
        BreakdownRow(
            key=key,
            name=name_of(key),
            present=t[AttendanceStatus.PRESENT],
            absent=t[AttendanceStatus.ABSENT],
            justified=t[AttendanceStatus.JUSTIFIED],
        )
        for key, t in tallies.items()
    ]
    if not include_empty:
        rows = [r for r in rows if r.total > 0]
    rows.sort(key=lambda r: r.attendance_rate, reverse=True)
    return rows


def group_breakdown(records: Iterable[RecordRow], index: ReferenceIndex) -> list[BreakdownRow]:
    return breakdown(records, lambda r: r.class_group_id, index.group_name)


def program_breakdown(records: Iterable[RecordRow], index: ReferenceIndex) -> list[BreakdownRow]:
    def program_key(record: RecordRow) -> Optional[str]:
        program = index.program_of_group(record.class_group_id)
        return program.id if program else None

    return breakdown(records, program_key, index.program_name, keys=list(index.programs))


def shift_breakdown(records: Iterable[RecordRow], index: ReferenceIndex) -> list[BreakdownRow]:
    def shift_key(record: RecordRow) -> Optional[str]:
        group = index.groups.get(record.class_group_id)
        return group.shift.value if group else None

    return breakdown(
        records,
        shift_key,
        lambda key: SHIFT_LABELS[Shift(key)],
        keys=[s.value for s in Shift],
        include_empty=True,
    )


class GroupReport(StatusCounts):
    id: str
    name: str
    program_name: str
    teacher_name: str
    shift: Shift
    shift_label: str
    student_count: int


def group_reports(records: Iterable[RecordRow], index: ReferenceIndex) -> list[GroupReport]:
    """One row per active group, including groups without records."""
    by_group: dict[str, list[RecordRow]] = {}
    for record in records:
        by_group.setdefault(record.class_group_id, []).append(record)

    reports = []
    for group in index.groups.values():
        if not group.is_active:
            continue
        counts = count_statuses(by_group.get(group.id, ()))
        program = index.programs.get(group.program_id)
        reports.append(
            GroupReport(
                id=group.id,
                name=group.name,
                program_name=program.name if program else PLACEHOLDER,
                teacher_name=index.user_name(group.teacher_id),
                shift=group.shift,
                shift_label=SHIFT_LABELS[group.shift],
                student_count=index.active_student_count(group.id),
                present=counts.present,
                absent=counts.absent,
                justified=counts.justified,
            )
        )
    reports.sort(key=lambda r: r.attendance_rate, reverse=True)
    return reports


def overall_summary(reports: list[GroupReport]) -> dict:
    """Totals across ranked group reports (best first)."""
    return {
        "total_groups": len(reports),
        "average_attendance": _rounded_mean([r.attendance_rate for r in reports]),
        "best_group": reports[0] if reports else None,
        "worst_group": reports[-1] if reports else None,
    }
