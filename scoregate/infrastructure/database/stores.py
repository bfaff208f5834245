# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy implementations of the store contracts.

Every store call opens its own short-lived session through a session
factory (``get_session`` by default), so stores can be shared by
concurrent requests and by the lock sweep.

Uniqueness is left to the database: a duplicate score id or a second
active grant surfaces as IntegrityError on flush and is translated into
DuplicateError. Locking a window is a single conditional UPDATE.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Callable

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scoregate.domains.exceptions import DuplicateError, NotFoundError
from scoregate.infrastructure.database.connection import get_session
from scoregate.infrastructure.database.tables import (
    AssignmentRow,
    EnrollmentRow,
    ScheduleWindowRow,
    ScoreRow,
)
from scoregate.infrastructure.stores.base import (
    AssignmentStore,
    RosterLookup,
    ScheduleStore,
    ScoreStore,
)
from scoregate.models.assignment import Assignment, AssignmentFilter
from scoregate.models.common import AssignmentRole, Semester
from scoregate.models.schedule import ScheduleWindow
from scoregate.models.score import ScoreRecord
from scoregate.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _semester_clause(column, semester: Semester):
    """Match a requested semester, BOTH rows included."""
    return or_(column == semester.value, column == Semester.BOTH.value)


class SqlAssignmentStore(AssignmentStore):
    """Assignment store over the teacher_assignments table."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        """Initialize the store.

        Args:
            session_factory: Callable returning an async session context.
        """
        self._session_factory = session_factory

    async def find_active(
        self,
        teacher_id: int,
        filters: AssignmentFilter | None = None,
    ) -> list[Assignment]:
        filters = filters or AssignmentFilter()
        query = select(AssignmentRow).where(
            AssignmentRow.teacher_id == teacher_id,
            AssignmentRow.is_active.is_(True),
        )
        if filters.class_name is not None:
            query = query.where(AssignmentRow.class_name == filters.class_name)
        if filters.subject is not None:
            query = query.where(AssignmentRow.subject == filters.subject)
        if filters.academic_year is not None:
            query = query.where(AssignmentRow.academic_year == filters.academic_year)
        if filters.semester is not None:
            query = query.where(_semester_clause(AssignmentRow.semester, filters.semester))

        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(row) for row in result.scalars().all()]

    async def find_by_class_id(self, teacher_id: int, class_id: int) -> list[Assignment]:
        query = select(AssignmentRow).where(
            AssignmentRow.teacher_id == teacher_id,
            AssignmentRow.class_id == class_id,
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(row) for row in result.scalars().all()]

    async def get(self, assignment_id: int) -> Assignment | None:
        async with self._session_factory() as session:
            row = await session.get(AssignmentRow, assignment_id)
            return self._to_model(row) if row else None

    async def add(self, assignment: Assignment) -> Assignment:
        row = AssignmentRow(
            teacher_id=assignment.teacher_id,
            class_id=assignment.class_id,
            class_name=assignment.class_name,
            subject=assignment.subject,
            academic_year=assignment.academic_year,
            semester=assignment.semester.value,
            role=assignment.role.value,
            is_active=assignment.is_active,
            assigned_at=assignment.assigned_at or utc_now(),
            ended_at=assignment.ended_at,
        )
        async with self._session_factory() as session:
            session.add(row)
            try:
                await session.flush()
            except IntegrityError as e:
                raise DuplicateError(
                    "Teacher already holds an active assignment for this class and subject",
                    {
                        "teacher_id": assignment.teacher_id,
                        "class_name": assignment.class_name,
                        "subject": assignment.subject,
                    },
                ) from e
            return self._to_model(row)

    async def save(self, assignment: Assignment) -> Assignment:
        async with self._session_factory() as session:
            row = await session.get(AssignmentRow, assignment.id)
            if row is None:
                raise NotFoundError(
                    f"Assignment {assignment.id} not found",
                    {"assignment_id": assignment.id},
                )
            row.role = assignment.role.value
            row.is_active = assignment.is_active
            row.ended_at = assignment.ended_at
            return assignment

    def _to_model(self, row: AssignmentRow) -> Assignment:
        """Convert an assignment row to its domain model."""
        return Assignment(
            id=row.id,
            teacher_id=row.teacher_id,
            class_id=row.class_id,
            class_name=row.class_name,
            subject=row.subject,
            academic_year=row.academic_year,
            semester=Semester(row.semester),
            role=AssignmentRole(row.role),
            is_active=row.is_active,
            assigned_at=ensure_utc(row.assigned_at),
            ended_at=ensure_utc(row.ended_at),
        )


class SqlScoreStore(ScoreStore):
    """Score store over the score_records table."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        """Initialize the store.

        Args:
            session_factory: Callable returning an async session context.
        """
        self._session_factory = session_factory

    async def get_by_id(self, score_id: str) -> ScoreRecord | None:
        async with self._session_factory() as session:
            row = await session.get(ScoreRow, score_id)
            return self._to_model(row) if row else None

    async def insert(self, record: ScoreRecord) -> ScoreRecord:
        row = ScoreRow(
            id=record.id,
            teacher_id=record.teacher_id,
            student_id=record.student_id,
            class_name=record.class_name,
            subject=record.subject,
            academic_year=record.academic_year,
            semester=record.semester.value,
            component_scores=list(record.component_scores),
            midterm_score=record.midterm_score,
            final_score=record.final_score,
            average=record.average,
            comment=record.comment,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        async with self._session_factory() as session:
            session.add(row)
            try:
                await session.flush()
            except IntegrityError as e:
                raise DuplicateError(
                    f"Score {record.id} already exists",
                    {"score_id": record.id},
                ) from e
        return record

    async def save(self, record: ScoreRecord) -> ScoreRecord:
        async with self._session_factory() as session:
            row = await session.get(ScoreRow, record.id)
            if row is None:
                raise NotFoundError(
                    f"Score {record.id} not found",
                    {"score_id": record.id},
                )
            row.component_scores = list(record.component_scores)
            row.midterm_score = record.midterm_score
            row.final_score = record.final_score
            row.average = record.average
            row.comment = record.comment
            row.updated_at = record.updated_at
        return record

    async def delete(self, score_id: str) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(ScoreRow).where(ScoreRow.id == score_id))

    async def list_for_class(
        self,
        class_name: str,
        subject: str,
        academic_year: int,
        semester: Semester,
    ) -> list[ScoreRecord]:
        query = select(ScoreRow).where(
            ScoreRow.class_name == class_name,
            ScoreRow.subject == subject,
            ScoreRow.academic_year == academic_year,
            ScoreRow.semester == semester.value,
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(row) for row in result.scalars().all()]

    def _to_model(self, row: ScoreRow) -> ScoreRecord:
        """Convert a score row to its domain model."""
        return ScoreRecord(
            id=row.id,
            teacher_id=row.teacher_id,
            student_id=row.student_id,
            class_name=row.class_name,
            subject=row.subject,
            academic_year=row.academic_year,
            semester=Semester(row.semester),
            component_scores=list(row.component_scores or []),
            midterm_score=row.midterm_score,
            final_score=row.final_score,
            average=row.average,
            comment=row.comment,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
        )


class SqlScheduleStore(ScheduleStore):
    """Schedule store over the schedule_windows table."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        """Initialize the store.

        Args:
            session_factory: Callable returning an async session context.
        """
        self._session_factory = session_factory

    async def get(self, window_id: int) -> ScheduleWindow | None:
        async with self._session_factory() as session:
            row = await session.get(ScheduleWindowRow, window_id)
            return self._to_model(row) if row else None

    async def list_active_windows(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
    ) -> list[ScheduleWindow]:
        query = select(ScheduleWindowRow).where(
            ScheduleWindowRow.class_name == class_name,
            ScheduleWindowRow.academic_year == academic_year,
            ScheduleWindowRow.semester == semester.value,
            ScheduleWindowRow.is_active.is_(True),
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(row) for row in result.scalars().all()]

    async def find_overlapping(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        start_time: datetime,
        end_time: datetime,
        exclude_id: int | None = None,
    ) -> list[ScheduleWindow]:
        query = select(ScheduleWindowRow).where(
            ScheduleWindowRow.class_name == class_name,
            ScheduleWindowRow.academic_year == academic_year,
            ScheduleWindowRow.semester == semester.value,
            ScheduleWindowRow.is_active.is_(True),
            ScheduleWindowRow.start_time <= end_time,
            ScheduleWindowRow.end_time >= start_time,
        )
        if exclude_id is not None:
            query = query.where(ScheduleWindowRow.id != exclude_id)

        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(row) for row in result.scalars().all()]

    async def list_lockable(self, before: datetime) -> list[ScheduleWindow]:
        query = select(ScheduleWindowRow).where(
            ScheduleWindowRow.end_time < before,
            ScheduleWindowRow.is_locked.is_(False),
            ScheduleWindowRow.is_active.is_(True),
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(row) for row in result.scalars().all()]

    async def list_by_year_semester(
        self,
        academic_year: int,
        semester: Semester,
    ) -> list[ScheduleWindow]:
        query = (
            select(ScheduleWindowRow)
            .where(
                ScheduleWindowRow.academic_year == academic_year,
                ScheduleWindowRow.semester == semester.value,
            )
            .order_by(ScheduleWindowRow.class_name.asc())
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(row) for row in result.scalars().all()]

    async def add(self, window: ScheduleWindow) -> ScheduleWindow:
        row = ScheduleWindowRow(
            name=window.name,
            class_name=window.class_name,
            academic_year=window.academic_year,
            semester=window.semester.value,
            start_time=window.start_time,
            end_time=window.end_time,
            is_active=window.is_active,
            is_locked=window.is_locked,
            created_by=window.created_by,
            description=window.description,
            created_at=window.created_at,
            updated_at=window.updated_at,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.flush()
            return self._to_model(row)

    async def save(self, window: ScheduleWindow) -> ScheduleWindow:
        async with self._session_factory() as session:
            row = await session.get(ScheduleWindowRow, window.id)
            if row is None:
                raise NotFoundError(
                    f"Schedule window {window.id} not found",
                    {"window_id": window.id},
                )
            row.name = window.name
            row.start_time = window.start_time
            row.end_time = window.end_time
            row.is_active = window.is_active
            # The lock flag only ever moves forward
            row.is_locked = row.is_locked or window.is_locked
            row.description = window.description
            row.updated_at = window.updated_at
        return window

    async def lock(self, window_id: int) -> bool:
        stmt = (
            update(ScheduleWindowRow)
            .where(
                ScheduleWindowRow.id == window_id,
                ScheduleWindowRow.is_locked.is_(False),
            )
            .values(is_locked=True, updated_at=utc_now())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def delete(self, window_id: int) -> None:
        async with self._session_factory() as session:
            await session.execute(
                delete(ScheduleWindowRow).where(ScheduleWindowRow.id == window_id)
            )

    def _to_model(self, row: ScheduleWindowRow) -> ScheduleWindow:
        """Convert a window row to its domain model."""
        return ScheduleWindow(
            id=row.id,
            name=row.name,
            class_name=row.class_name,
            academic_year=row.academic_year,
            semester=Semester(row.semester),
            start_time=ensure_utc(row.start_time),
            end_time=ensure_utc(row.end_time),
            is_active=row.is_active,
            is_locked=row.is_locked,
            created_by=row.created_by,
            description=row.description,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
        )


class SqlRosterLookup(RosterLookup):
    """Roster lookup over the student_enrollments table."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        """Initialize the lookup.

        Args:
            session_factory: Callable returning an async session context.
        """
        self._session_factory = session_factory

    async def is_student_in_class(
        self,
        student_id: int,
        class_id: int,
        academic_year: int,
        semester: Semester,
    ) -> bool:
        query = (
            select(EnrollmentRow.id)
            .where(
                EnrollmentRow.student_id == student_id,
                EnrollmentRow.class_id == class_id,
                EnrollmentRow.academic_year == academic_year,
                _semester_clause(EnrollmentRow.semester, semester),
                EnrollmentRow.is_active.is_(True),
            )
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return result.scalar_one_or_none() is not None
