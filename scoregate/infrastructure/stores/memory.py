# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory store implementations.

Used by the test suite and for local development. Records are deep-copied
on the way in and out so callers never share state with the store.

Insert uniqueness relies on the event loop: the existence check and the
write happen without an ``await`` in between, so two concurrent inserts of
the same id cannot both succeed.
"""

from dataclasses import dataclass
from datetime import datetime
from itertools import count

from scoregate.domains.exceptions import DuplicateError
from scoregate.infrastructure.stores.base import (
    AssignmentStore,
    RosterLookup,
    ScheduleStore,
    ScoreStore,
)
from scoregate.models.assignment import Assignment, AssignmentFilter
from scoregate.models.common import Semester
from scoregate.models.schedule import ScheduleWindow
from scoregate.models.score import ScoreRecord


class InMemoryAssignmentStore(AssignmentStore):
    """Assignment store backed by a dict keyed by assignment id."""

    def __init__(self, assignments: list[Assignment] | None = None) -> None:
        self._items: dict[int, Assignment] = {}
        self._ids = count(1)
        for assignment in assignments or []:
            self._put_new(assignment)

    def _put_new(self, assignment: Assignment) -> Assignment:
        stored = assignment.model_copy(update={"id": next(self._ids)}, deep=True)
        self._items[stored.id] = stored
        return stored.model_copy(deep=True)

    async def find_active(
        self,
        teacher_id: int,
        filters: AssignmentFilter | None = None,
    ) -> list[Assignment]:
        filters = filters or AssignmentFilter()
        return [
            a.model_copy(deep=True)
            for a in self._items.values()
            if a.teacher_id == teacher_id and a.is_active and filters.matches(a)
        ]

    async def find_by_class_id(self, teacher_id: int, class_id: int) -> list[Assignment]:
        return [
            a.model_copy(deep=True)
            for a in self._items.values()
            if a.teacher_id == teacher_id and a.class_id == class_id
        ]

    async def get(self, assignment_id: int) -> Assignment | None:
        assignment = self._items.get(assignment_id)
        return assignment.model_copy(deep=True) if assignment else None

    async def add(self, assignment: Assignment) -> Assignment:
        return self._put_new(assignment)

    async def save(self, assignment: Assignment) -> Assignment:
        self._items[assignment.id] = assignment.model_copy(deep=True)
        return assignment


class InMemoryScoreStore(ScoreStore):
    """Score store backed by a dict keyed by composite id."""

    def __init__(self) -> None:
        self._items: dict[str, ScoreRecord] = {}

    async def get_by_id(self, score_id: str) -> ScoreRecord | None:
        record = self._items.get(score_id)
        return record.model_copy(deep=True) if record else None

    async def insert(self, record: ScoreRecord) -> ScoreRecord:
        if record.id in self._items:
            raise DuplicateError(
                f"Score {record.id} already exists",
                {"score_id": record.id},
            )
        self._items[record.id] = record.model_copy(deep=True)
        return record

    async def save(self, record: ScoreRecord) -> ScoreRecord:
        self._items[record.id] = record.model_copy(deep=True)
        return record

    async def delete(self, score_id: str) -> None:
        self._items.pop(score_id, None)

    async def list_for_class(
        self,
        class_name: str,
        subject: str,
        academic_year: int,
        semester: Semester,
    ) -> list[ScoreRecord]:
        return [
            r.model_copy(deep=True)
            for r in self._items.values()
            if r.class_name == class_name
            and r.subject == subject
            and r.academic_year == academic_year
            and r.semester is semester
        ]


class InMemoryScheduleStore(ScheduleStore):
    """Schedule store backed by a dict keyed by window id."""

    def __init__(self, windows: list[ScheduleWindow] | None = None) -> None:
        self._items: dict[int, ScheduleWindow] = {}
        self._ids = count(1)
        for window in windows or []:
            stored = window.model_copy(update={"id": next(self._ids)}, deep=True)
            self._items[stored.id] = stored

    async def get(self, window_id: int) -> ScheduleWindow | None:
        window = self._items.get(window_id)
        return window.model_copy(deep=True) if window else None

    async def list_active_windows(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
    ) -> list[ScheduleWindow]:
        return [
            w.model_copy(deep=True)
            for w in self._items.values()
            if w.is_active
            and w.class_name == class_name
            and w.academic_year == academic_year
            and w.semester is semester
        ]

    async def list_lockable(self, before: datetime) -> list[ScheduleWindow]:
        return [
            w.model_copy(deep=True)
            for w in self._items.values()
            if w.is_active and not w.is_locked and w.end_time < before
        ]

    async def list_by_year_semester(
        self,
        academic_year: int,
        semester: Semester,
    ) -> list[ScheduleWindow]:
        windows = [
            w.model_copy(deep=True)
            for w in self._items.values()
            if w.academic_year == academic_year and w.semester is semester
        ]
        return sorted(windows, key=lambda w: w.class_name)

    async def add(self, window: ScheduleWindow) -> ScheduleWindow:
        stored = window.model_copy(update={"id": next(self._ids)}, deep=True)
        self._items[stored.id] = stored
        return stored.model_copy(deep=True)

    async def save(self, window: ScheduleWindow) -> ScheduleWindow:
        current = self._items.get(window.id)
        # The lock flag only ever moves forward
        is_locked = window.is_locked or (current is not None and current.is_locked)
        self._items[window.id] = window.model_copy(update={"is_locked": is_locked}, deep=True)
        return window

    async def lock(self, window_id: int) -> bool:
        window = self._items.get(window_id)
        if window is None or window.is_locked:
            return False
        window.is_locked = True
        return True

    async def delete(self, window_id: int) -> None:
        self._items.pop(window_id, None)


@dataclass(frozen=True)
class Enrollment:
    """A student's membership in a class for a year and semester."""

    student_id: int
    class_id: int
    academic_year: int
    semester: Semester
    is_active: bool = True


class InMemoryRosterLookup(RosterLookup):
    """Roster lookup over a list of enrollments."""

    def __init__(self, enrollments: list[Enrollment] | None = None) -> None:
        self._enrollments: list[Enrollment] = list(enrollments or [])

    def enroll(
        self,
        student_id: int,
        class_id: int,
        academic_year: int,
        semester: Semester = Semester.BOTH,
    ) -> None:
        """Add an active enrollment."""
        self._enrollments.append(
            Enrollment(student_id, class_id, academic_year, semester)
        )

    async def is_student_in_class(
        self,
        student_id: int,
        class_id: int,
        academic_year: int,
        semester: Semester,
    ) -> bool:
        return any(
            e.is_active
            and e.student_id == student_id
            and e.class_id == class_id
            and e.academic_year == academic_year
            and e.semester.covers(semester)
            for e in self._enrollments
        )
