from datetime import date

import pytest

from app.models.attendance import AttendanceStatus
from app.services.aggregator import (
    attendance_rate,
    breakdown,
    count_statuses,
    daily_trend,
    group_reports,
    overall_summary,
    preset_range,
    program_breakdown,
    records_between,
    shift_breakdown,
    trailing_range,
)
from app.services.record_filter import ReportFilters, query_records
from tests.factories import record


def test_rate_for_mixed_day(index, snapshot):
    rows = query_records(snapshot.records, index, ReportFilters(campus_id="C1"))
    counts = count_statuses(rows)

    assert (counts.present, counts.absent, counts.justified) == (1, 1, 0)
    assert counts.total == 2
    assert counts.attendance_rate == 50


def test_justifying_the_absence_raises_rate_to_100(index, snapshot):
    justified = [
        r if r.id != "R2" else r.model_copy(update={"status": AttendanceStatus.JUSTIFIED})
        for r in snapshot.records
    ]
    counts = count_statuses(query_records(justified, index, ReportFilters(campus_id="C1")))

    assert (counts.present, counts.absent, counts.justified) == (1, 0, 1)
    assert counts.attendance_rate == 100


def test_empty_set_rate_is_zero():
    counts = count_statuses([])
    assert counts.total == 0
    assert counts.attendance_rate == 0


@pytest.mark.parametrize(
    "present, justified, total, expected",
    [
        (1, 0, 8, 13),  # 12.5 rounds up
        (1, 0, 3, 33),
        (2, 0, 3, 67),
        (0, 1, 200, 1),  # 0.5 rounds up
        (0, 0, 5, 0),
        (5, 0, 5, 100),
        (2, 3, 5, 100),
    ],
)
def test_rate_rounds_half_up(present, justified, total, expected):
    assert attendance_rate(present, justified, total) == expected


def test_serialized_counts_include_total_and_rate():
    data = count_statuses([record("R", "A", "G1", "2024-03-01", AttendanceStatus.PRESENT)]).model_dump()
    assert data == {"present": 1, "absent": 0, "justified": 0, "total": 1, "attendance_rate": 100}


def test_trailing_ranges():
    today = date(2024, 3, 10)
    assert trailing_range(1, today) == (today, today)
    assert preset_range("today", today) == ("2024-03-10", "2024-03-10")
    assert preset_range("week", today) == ("2024-03-04", "2024-03-10")
    assert preset_range("month", today) == ("2024-02-10", "2024-03-10")


def test_unknown_preset_is_rejected():
    with pytest.raises(ValueError):
        preset_range("year", date(2024, 3, 10))


def test_records_between_inclusive(snapshot, g2_records):
    rows = records_between(list(snapshot.records) + g2_records, "2024-03-02", "2024-03-05")
    assert [r.id for r in rows] == ["R3"]


def test_week_trend_without_records_is_zero_filled():
    trend = daily_trend([], 7, date(2024, 3, 10))

    assert len(trend) == 7
    assert trend[0].date == "2024-03-04"
    assert trend[-1].date == "2024-03-10"
    assert all(p.total == 0 and p.attendance_rate == 0 for p in trend)


def test_trend_counts_justified_as_attended(snapshot, g2_records):
    trend = daily_trend(list(snapshot.records) + g2_records, 3, date(2024, 3, 2))

    by_day = {p.date: p for p in trend}
    assert [p.date for p in trend] == ["2024-02-29", "2024-03-01", "2024-03-02"]
    assert (by_day["2024-03-01"].present, by_day["2024-03-01"].total) == (1, 3)
    assert by_day["2024-03-01"].attendance_rate == 33
    assert by_day["2024-03-02"].attendance_rate == 100
    assert by_day["2024-02-29"].total == 0


def test_breakdown_sorted_by_rate_with_stable_ties():
    records = [
        record("1", "s", "low", "2024-03-01", AttendanceStatus.ABSENT),
        record("2", "s", "tie-a", "2024-03-01", AttendanceStatus.PRESENT),
        record("3", "s", "tie-b", "2024-03-01", AttendanceStatus.JUSTIFIED),
        record("4", "s", "mid", "2024-03-01", AttendanceStatus.PRESENT),
        record("5", "s", "mid", "2024-03-01", AttendanceStatus.ABSENT),
    ]

    rows = breakdown(records, lambda r: r.class_group_id, str.upper)

    assert [r.key for r in rows] == ["tie-a", "tie-b", "mid", "low"]
    assert [r.attendance_rate for r in rows] == [100, 100, 50, 0]
    assert rows[0].name == "TIE-A"


def test_program_breakdown_only_lists_programs_with_records(index, snapshot):
    rows = program_breakdown(snapshot.records, index)
    assert [(r.key, r.name, r.attendance_rate) for r in rows] == [("P1", "Sistemas", 50)]


def test_shift_breakdown_lists_every_shift(index, snapshot, g2_records):
    rows = shift_breakdown(list(snapshot.records) + g2_records, index)

    assert [r.key for r in rows] == ["morning", "evening", "afternoon"]
    assert [r.attendance_rate for r in rows] == [50, 50, 0]
    assert rows[1].justified == 1
    assert rows[2].total == 0


def test_group_reports_cover_active_groups(index, snapshot, g2_records):
    reports = group_reports(list(snapshot.records) + g2_records, index)

    assert [r.id for r in reports] == ["G1", "G2"]
    g1 = reports[0]
    assert g1.program_name == "Sistemas"
    assert g1.teacher_name == "Prof. Torres"
    assert g1.shift_label == "Matutino"
    assert g1.student_count == 2
    assert (g1.absent, g1.justified, g1.attendance_rate) == (1, 0, 50)


def test_group_without_records_reports_zero(index):
    reports = group_reports([], index)
    assert {r.id: r.attendance_rate for r in reports} == {"G1": 0, "G2": 0}


def test_overall_summary(index, snapshot):
    reports = group_reports(snapshot.records, index)
    summary = overall_summary(reports)

    assert summary["total_groups"] == 2
    # mean of 50 and 0
    assert summary["average_attendance"] == 25
    assert summary["best_group"].id == "G1"
    assert summary["worst_group"].id == "G2"


def test_overall_summary_empty():
    assert overall_summary([]) == {
        "total_groups": 0,
        "average_attendance": 0,
        "best_group": None,
        "worst_group": None,
    }
