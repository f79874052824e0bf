import asyncio

import pytest
from pymongo import UpdateMany, UpdateOne

from app.models.attendance import AttendanceMark, AttendanceRecord, AttendanceStatus
from app.models.justification import Justification
from app.services import attendance as attendance_service
from app.services.attendance import (
    AttendancePlan,
    StatusUpdate,
    build_roster,
    plan_attendance,
    roster_stats,
)
from tests.factories import record

P = AttendanceStatus.PRESENT
A = AttendanceStatus.ABSENT
J = AttendanceStatus.JUSTIFIED


def test_roster_defaults_to_present_sorted_by_last_name(snapshot):
    roster = build_roster(snapshot.students, [])

    # group filtering happens in the query; Diego is inactive
    names = [e.last_name for e in roster]
    assert names == ["Alvarez", "Ruiz", "Zamora"]
    assert all(e.status == P and e.record_id is None for e in roster)


def test_roster_uses_stored_status(snapshot):
    g1 = [s for s in snapshot.students if s.class_group_id == "G1"]
    roster = build_roster(g1, snapshot.records)

    by_id = {e.student_id: e for e in roster}
    assert by_id["A"].status == P
    assert by_id["B"].status == A
    assert by_id["B"].record_id == "R2"

    stats = roster_stats(roster)
    assert (stats.present, stats.absent, stats.total, stats.attendance_rate) == (1, 1, 2, 50)


def _plan(marks, existing=()):
    return plan_attendance(
        class_group_id="G1",
        date="2024-03-01",
        teacher_id="T1",
        marks=marks,
        roster_student_ids={"A", "B"},
        existing=existing,
    )


def test_first_save_inserts_everything():
    plan = _plan([AttendanceMark(student_id="A"), AttendanceMark(student_id="B", status=A)])

    assert [m.student_id for m in plan.inserts] == ["A", "B"]
    assert plan.updates == []
    assert plan.write_count == 2


def test_resave_updates_changed_and_skips_unchanged(snapshot):
    plan = _plan(
        [AttendanceMark(student_id="A", status=P), AttendanceMark(student_id="B", status=P)],
        existing=snapshot.records,
    )

    assert plan.inserts == []
    assert plan.unchanged == ["R1"]
    assert plan.updates == [StatusUpdate(record_id="R2", student_id="B", previous=A, status=P)]
    assert plan.unjustified_record_ids == []


def test_records_for_other_dates_are_not_reused():
    other_day = [record("R9", "A", "G1", "2024-02-28", P)]
    plan = _plan([AttendanceMark(student_id="A")], existing=other_day)
    assert [m.student_id for m in plan.inserts] == ["A"]


def test_moving_away_from_justified_is_flagged():
    existing = [record("R5", "B", "G1", "2024-03-01", J)]

    plan = _plan([AttendanceMark(student_id="B", status=A)], existing=existing)

    assert plan.unjustified_record_ids == ["R5"]


def test_keeping_justified_does_not_flag():
    existing = [record("R5", "B", "G1", "2024-03-01", J)]
    plan = _plan([AttendanceMark(student_id="B", status=J)], existing=existing)
    assert plan.unjustified_record_ids == []
    assert plan.write_count == 0


def test_student_outside_group_is_rejected():
    with pytest.raises(ValueError, match="not an active member"):
        _plan([AttendanceMark(student_id="C")])


def test_duplicate_student_is_rejected():
    with pytest.raises(ValueError, match="more than once"):
        _plan([AttendanceMark(student_id="A"), AttendanceMark(student_id="A", status=A)])


def test_commit_sends_one_batch(monkeypatch):
    batches = []

    async def fake_run_batch(writes):
        batches.append(writes)

    monkeypatch.setattr(attendance_service, "run_batch", fake_run_batch)
    monkeypatch.setattr(AttendanceRecord, "get_motor_collection", lambda: "records")
    monkeypatch.setattr(Justification, "get_motor_collection", lambda: "justifications")

    plan = AttendancePlan(
        class_group_id="G1",
        date="2024-03-01",
        teacher_id="T1",
        inserts=[AttendanceMark(student_id="A")],
        updates=[
            StatusUpdate(record_id="65f000000000000000000001", student_id="B", previous=J, status=A)
        ],
    )
    asyncio.run(attendance_service.commit_attendance(plan))

    assert len(batches) == 1
    (records_coll, record_ops), (just_coll, just_ops) = batches[0]
    assert (records_coll, just_coll) == ("records", "justifications")
    assert len(record_ops) == 2 and all(isinstance(op, UpdateOne) for op in record_ops)
    assert len(just_ops) == 1 and isinstance(just_ops[0], UpdateMany)
