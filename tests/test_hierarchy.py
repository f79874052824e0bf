import pytest

from app.services.hierarchy import (
    HierarchyFilter,
    filter_options,
    resolve_group_ids,
    resolve_scopes,
    select_level,
)


def test_unconstrained_filter_returns_every_group(index):
    state = HierarchyFilter()
    assert state.is_unconstrained()
    assert resolve_group_ids(index, state) == {"G1", "G2", "G3"}


def test_all_and_blank_mean_no_constraint(index):
    state = HierarchyFilter(campus_id="all", school_id="", program_id=None)
    assert state.is_unconstrained()
    assert resolve_group_ids(index, state) == {"G1", "G2", "G3"}


def test_campus_cascades_to_groups(index):
    assert resolve_group_ids(index, HierarchyFilter(campus_id="C1")) == {"G1", "G3"}
    assert resolve_group_ids(index, HierarchyFilter(campus_id="C2")) == {"G2"}


def test_each_level_narrows(index):
    states = [
        HierarchyFilter(),
        HierarchyFilter(campus_id="C1"),
        HierarchyFilter(campus_id="C1", school_id="S1"),
        HierarchyFilter(campus_id="C1", school_id="S1", program_id="P1"),
        HierarchyFilter(campus_id="C1", school_id="S1", program_id="P1", group_id="G1"),
    ]
    previous = None
    for state in states:
        groups = resolve_group_ids(index, state)
        if previous is not None:
            assert groups <= previous
        previous = groups
    assert previous == {"G1"}


def test_inconsistent_levels_resolve_to_nothing(index):
    # S2 belongs to C2, so nothing satisfies both constraints
    assert resolve_group_ids(index, HierarchyFilter(campus_id="C1", school_id="S2")) == set()
    assert resolve_group_ids(index, HierarchyFilter(program_id="P1", group_id="G2")) == set()


def test_unknown_ids_resolve_to_nothing(index):
    assert resolve_group_ids(index, HierarchyFilter(campus_id="missing")) == set()
    assert resolve_group_ids(index, HierarchyFilter(group_id="missing")) == set()


def test_scopes_stay_none_when_level_unconstrained(index):
    schools, programs, groups = resolve_scopes(index, HierarchyFilter(group_id="G2"))
    assert schools is None
    assert programs is None
    assert groups == {"G2"}


def test_select_level_clears_descendants():
    state = HierarchyFilter(campus_id="C1", school_id="S1", program_id="P1", group_id="G1")

    state = select_level(state, "school_id", "S9")

    assert state.campus_id == "C1"
    assert state.school_id == "S9"
    assert state.program_id is None
    assert state.group_id is None


def test_select_level_keeps_ancestors_and_normalizes():
    state = HierarchyFilter(campus_id="C1", school_id="S1", program_id="P1")
    state = select_level(state, "campus_id", "all")
    assert state == HierarchyFilter()


def test_select_level_rejects_unknown_level():
    with pytest.raises(ValueError):
        select_level(HierarchyFilter(), "faculty_id", "X")


def test_filter_options_cascade(index):
    options = filter_options(index, HierarchyFilter(campus_id="C1"))

    assert [c["id"] for c in options["campuses"]] == ["C1", "C2"]
    assert [s["id"] for s in options["schools"]] == ["S1"]
    assert [p["id"] for p in options["programs"]] == ["P1"]
    # G3 is inactive
    assert [g["id"] for g in options["groups"]] == ["G1"]


def test_filter_options_can_include_inactive(index):
    options = filter_options(index, HierarchyFilter(program_id="P1"), active_only=False)
    assert {g["id"] for g in options["groups"]} == {"G1", "G3"}
