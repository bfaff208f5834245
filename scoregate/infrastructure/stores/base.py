# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Collaborator contracts consumed by the rule engine.

The engine never talks to a database directly. Each component receives the
store it needs through its constructor:

- AssignmentStore: teacher grants
- ScoreStore: score records keyed by composite id
- ScheduleStore: score entry windows
- RosterLookup: student enrollment in classes

Two implementations ship with the package: in-memory stores for tests and
development, and SQLAlchemy stores for production.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from scoregate.models.assignment import Assignment, AssignmentFilter
from scoregate.models.common import Semester
from scoregate.models.schedule import ScheduleWindow
from scoregate.models.score import ScoreRecord


class AssignmentStore(ABC):
    """Storage contract for teacher assignments."""

    @abstractmethod
    async def find_active(
        self,
        teacher_id: int,
        filters: AssignmentFilter | None = None,
    ) -> list[Assignment]:
        """Find active assignments of a teacher.

        Args:
            teacher_id: Teacher identifier.
            filters: Optional class/subject/year/semester narrowing. A
                requested semester also matches BOTH grants.

        Returns:
            Matching active assignments.
        """
        ...

    @abstractmethod
    async def find_by_class_id(self, teacher_id: int, class_id: int) -> list[Assignment]:
        """Find every assignment (active or not) of a teacher for a class id."""
        ...

    @abstractmethod
    async def get(self, assignment_id: int) -> Assignment | None:
        """Get an assignment by id."""
        ...

    @abstractmethod
    async def add(self, assignment: Assignment) -> Assignment:
        """Persist a new assignment and return it with its id set."""
        ...

    @abstractmethod
    async def save(self, assignment: Assignment) -> Assignment:
        """Persist changes to an existing assignment."""
        ...


class ScoreStore(ABC):
    """Storage contract for score records."""

    @abstractmethod
    async def get_by_id(self, score_id: str) -> ScoreRecord | None:
        """Get a score record by composite id."""
        ...

    @abstractmethod
    async def insert(self, record: ScoreRecord) -> ScoreRecord:
        """Insert a new record.

        Uniqueness of the id is enforced here, atomically.

        Raises:
            DuplicateError: If a record with the same id exists.
        """
        ...

    @abstractmethod
    async def save(self, record: ScoreRecord) -> ScoreRecord:
        """Overwrite an existing record with the same id."""
        ...

    @abstractmethod
    async def delete(self, score_id: str) -> None:
        """Delete a record by id."""
        ...

    @abstractmethod
    async def list_for_class(
        self,
        class_name: str,
        subject: str,
        academic_year: int,
        semester: Semester,
    ) -> list[ScoreRecord]:
        """List every record of one class score sheet."""
        ...


class ScheduleStore(ABC):
    """Storage contract for score entry windows."""

    @abstractmethod
    async def get(self, window_id: int) -> ScheduleWindow | None:
        """Get a window by id, active or not."""
        ...

    @abstractmethod
    async def list_active_windows(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
    ) -> list[ScheduleWindow]:
        """List active windows for a class tuple, locked ones included."""
        ...

    @abstractmethod
    async def list_lockable(self, before: datetime) -> list[ScheduleWindow]:
        """List active, unlocked windows whose end time is before ``before``."""
        ...

    @abstractmethod
    async def list_by_year_semester(
        self,
        academic_year: int,
        semester: Semester,
    ) -> list[ScheduleWindow]:
        """List all windows of a year and semester ordered by class name."""
        ...

    @abstractmethod
    async def add(self, window: ScheduleWindow) -> ScheduleWindow:
        """Persist a new window and return it with its id set."""
        ...

    @abstractmethod
    async def save(self, window: ScheduleWindow) -> ScheduleWindow:
        """Persist changes to an existing window."""
        ...

    @abstractmethod
    async def lock(self, window_id: int) -> bool:
        """Flip ``is_locked`` to True in a single atomic update.

        Returns:
            True if this call changed the flag, False if it was already set.
        """
        ...

    @abstractmethod
    async def delete(self, window_id: int) -> None:
        """Delete a window by id."""
        ...

    async def find_overlapping(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        start_time: datetime,
        end_time: datetime,
        exclude_id: int | None = None,
    ) -> list[ScheduleWindow]:
        """Find active windows of the tuple intersecting a time range.

        Args:
            class_name: Class name.
            academic_year: Academic year.
            semester: Concrete semester.
            start_time: Range start.
            end_time: Range end.
            exclude_id: Window to ignore (the one being updated).

        Returns:
            Intersecting active windows.
        """
        windows = await self.list_active_windows(class_name, academic_year, semester)
        return [
            w
            for w in windows
            if w.id != exclude_id and w.intersects(start_time, end_time)
        ]

    async def find_active_window(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        at: datetime,
    ) -> ScheduleWindow | None:
        """Find the active window relevant at a point in time.

        Active windows of one tuple never overlap, so at most one contains
        ``at``. Without one, the most recently started window is returned,
        then the earliest upcoming one.

        Args:
            class_name: Class name.
            academic_year: Academic year.
            semester: Concrete semester.
            at: Evaluation time.

        Returns:
            The relevant window, or None if the tuple has no active window.
        """
        windows = await self.list_active_windows(class_name, academic_year, semester)
        if not windows:
            return None

        for window in windows:
            if window.start_time <= at <= window.end_time:
                return window

        started = [w for w in windows if w.start_time <= at]
        if started:
            return max(started, key=lambda w: w.start_time)
        return min(windows, key=lambda w: w.start_time)


class RosterLookup(ABC):
    """Enrollment lookup for students in classes."""

    @abstractmethod
    async def is_student_in_class(
        self,
        student_id: int,
        class_id: int,
        academic_year: int,
        semester: Semester,
    ) -> bool:
        """Check if a student is actively enrolled in a class.

        Enrollments for BOTH semesters match either concrete semester.
        """
        ...
