from app.models.snapshot import Snapshot
from app.services.reference_index import PLACEHOLDER, ReferenceIndex


def test_resolves_display_names(index):
    assert index.campus_name("C1") == "Central"
    assert index.school_name("S2") == "Derecho"
    assert index.program_name("P1") == "Sistemas"
    assert index.group_name("G2") == "DC-3B"
    assert index.user_name("T1") == "Prof. Torres"
    assert index.student_name("A") == "Ana Zamora"
    assert index.student_number("B") == "2024002"


def test_unknown_or_missing_ids_fall_back_to_placeholder(index):
    assert index.group_name("nope") == PLACEHOLDER
    assert index.user_name(None) == PLACEHOLDER
    assert index.student_name("") == PLACEHOLDER
    assert index.student_number("ghost") == PLACEHOLDER
    assert index.program_of_group("ghost") is None


def test_program_of_group(index):
    assert index.program_of_group("G1").id == "P1"


def test_active_student_count_skips_inactive(index):
    assert index.active_student_count("G1") == 2
    assert index.active_student_count("G3") == 0


def test_empty_snapshot():
    index = ReferenceIndex(Snapshot())
    assert index.groups == {}
    assert index.campus_name("C1") == PLACEHOLDER
