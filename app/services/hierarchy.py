"""Campus -> school -> program -> group filter state and resolution."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.services.reference_index import ReferenceIndex

LEVELS = ("campus_id", "school_id", "program_id", "group_id")

# Values the clients send for "no constraint".
_UNSET_VALUES = ("", "all")


def normalize_selection(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return None if value in _UNSET_VALUES else value


class HierarchyFilter(BaseModel):
    """One optional selection per hierarchy level."""
    model_config = ConfigDict(frozen=True)

    campus_id: Optional[str] = None
    school_id: Optional[str] = None
    program_id: Optional[str] = None
    group_id: Optional[str] = None

    @field_validator(*LEVELS, mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_selection(value)

    def is_unconstrained(self) -> bool:
        return all(getattr(self, level) is None for level in LEVELS)


def select_level(state: HierarchyFilter, level: str, value: Optional[str]) -> HierarchyFilter:
    """Set one level and clear every level below it.

    A child picked under the previous parent may not belong to the new one,
    so descendants are always reset in the same transition.
    """
    if level not in LEVELS:
        raise ValueError(f"Unknown hierarchy level: {level}")
    position = LEVELS.index(level)
    update = {level: normalize_selection(value)}
    for child in LEVELS[position + 1:]:
        update[child] = None
    return state.model_copy(update=update)


def _narrow(scope: Optional[set[str]], selected: Optional[str]) -> Optional[set[str]]:
    if selected is None:
        return scope
    if scope is None:
        return {selected}
    return scope & {selected}


def resolve_scopes(index: ReferenceIndex, state: HierarchyFilter) -> tuple[
    Optional[set[str]], Optional[set[str]], set[str]
]:
    """Return (school ids, program ids, group ids) in scope.

    ``None`` for schools/programs means the level is unconstrained.
    """
    school_ids: Optional[set[str]] = None
    if state.campus_id is not None:
        school_ids = {s.id for s in index.schools.values() if s.campus_id == state.campus_id}
    school_ids = _narrow(school_ids, state.school_id)

    program_ids: Optional[set[str]] = None
    if school_ids is not None:
        program_ids = {p.id for p in index.programs.values() if p.school_id in school_ids}
    program_ids = _narrow(program_ids, state.program_id)

    if program_ids is None:
        group_ids = set(index.groups)
    else:
        group_ids = {g.id for g in index.groups.values() if g.program_id in program_ids}
    if state.group_id is not None:
        group_ids &= {state.group_id}
    return school_ids, program_ids, group_ids


def resolve_group_ids(index: ReferenceIndex, state: HierarchyFilter) -> set[str]:
    """Group ids consistent with every constrained level at once."""
    return resolve_scopes(index, state)[2]


def filter_options(index: ReferenceIndex, state: HierarchyFilter, active_only: bool = True) -> dict:
    """Selectable values for each level under the current selection."""
    school_ids, program_ids, group_ids = resolve_scopes(
        index, HierarchyFilter(campus_id=state.campus_id, school_id=state.school_id, program_id=state.program_id)
    )

    def visible(row) -> bool:
        return row.is_active or not active_only

    campuses = [c for c in index.campuses.values() if visible(c)]
    schools = [
        s for s in index.schools.values()
        if visible(s) and (state.campus_id is None or s.campus_id == state.campus_id)
    ]
    programs = [
        p for p in index.programs.values()
        if visible(p) and (school_ids is None or p.school_id in school_ids)
    ]
    groups = [
        g for g in index.groups.values()
        if visible(g) and (program_ids is None or g.id in group_ids)
    ]
    return {
        "campuses": [{"id": c.id, "name": c.name} for c in campuses],
        "schools": [{"id": s.id, "name": s.name, "campus_id": s.campus_id} for s in schools],
        "programs": [{"id": p.id, "name": p.name, "code": p.code, "school_id": p.school_id} for p in programs],
        "groups": [
            {"id": g.id, "name": g.name, "program_id": g.program_id, "shift": g.shift.value}
            for g in groups
        ],
    }
