"""Read-through cache of whole collections and consistent snapshots."""
from __future__ import annotations

import asyncio
import logging
import time
from functools import partial
from typing import Awaitable, Callable, Iterable, Optional

from app.config import settings
from app.models.attendance import AttendanceRecord
from app.models.campus import Campus
from app.models.class_group import ClassGroup
from app.models.justification import Justification
from app.models.program import Program
from app.models.school import School
from app.models.snapshot import (
    CampusRow,
    GroupRow,
    JustificationRow,
    ProgramRow,
    RecordRow,
    SchoolRow,
    Snapshot,
    StudentRow,
    UserRow,
)
from app.models.student import Student
from app.models.user import User

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[list]]

ALL_COLLECTIONS = (
    "campuses",
    "schools",
    "programs",
    "groups",
    "students",
    "users",
    "records",
    "justifications",
)
REFERENCE_COLLECTIONS = ("campuses", "schools", "programs", "groups", "students", "users")


class CollectionCache:
    """Keeps the last loaded rows per collection until invalidated or expired.

    A load that was in flight when its collection got invalidated is
    returned to its caller but never stored.
    """

    def __init__(
        self,
        loaders: dict[str, Loader],
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loaders = loaders
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, list]] = {}
        self._generations: dict[str, int] = {}

    def _fresh(self, loaded_at: float) -> bool:
        if not self._ttl or self._ttl <= 0:
            return True
        return self._clock() - loaded_at < self._ttl

    async def get(self, name: str) -> list:
        if name not in self._loaders:
            raise KeyError(f"Unknown collection: {name}")
        entry = self._entries.get(name)
        if entry and self._fresh(entry[0]):
            return entry[1]

        generation = self._generations.get(name, 0)
        rows = await self._loaders[name]()
        if self._generations.get(name, 0) == generation:
            self._entries[name] = (self._clock(), rows)
        else:
            logger.debug("Discarding stale load of %s", name)
        return rows

    def invalidate(self, *names: str) -> None:
        for name in names:
            self._entries.pop(name, None)
            self._generations[name] = self._generations.get(name, 0) + 1
        logger.debug("Invalidated collections: %s", ", ".join(names))

    def clear(self) -> None:
        self.invalidate(*list(self._loaders))


async def load_snapshot(cache: CollectionCache, names: Iterable[str] = ALL_COLLECTIONS) -> Snapshot:
    """Fetch the requested collections together, then freeze them."""
    names = tuple(names)
    results = await asyncio.gather(*(cache.get(name) for name in names))
    return Snapshot(**dict(zip(names, results)))


async def _load_rows(document_cls, row_cls) -> list:
    documents = await document_cls.find_all().to_list()
    return [row_cls.model_validate(doc) for doc in documents]


cache = CollectionCache(
    {
        "campuses": partial(_load_rows, Campus, CampusRow),
        "schools": partial(_load_rows, School, SchoolRow),
        "programs": partial(_load_rows, Program, ProgramRow),
        "groups": partial(_load_rows, ClassGroup, GroupRow),
        "students": partial(_load_rows, Student, StudentRow),
        "users": partial(_load_rows, User, UserRow),
        "records": partial(_load_rows, AttendanceRecord, RecordRow),
        "justifications": partial(_load_rows, Justification, JustificationRow),
    },
    ttl_seconds=settings.snapshot_ttl_seconds,
)


async def get_snapshot(*names: str) -> Snapshot:
    return await load_snapshot(cache, names or ALL_COLLECTIONS)
