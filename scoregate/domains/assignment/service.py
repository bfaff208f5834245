# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher assignment service.

This module provides the AssignmentService class for:
- Granting a teacher a class and subject for a year and semester
- Ending (soft-deactivating) a grant
- Listing a teacher's grants

At most one active grant exists per teacher, class, subject, year and
semester. A BOTH grant conflicts with either concrete semester.
"""

from __future__ import annotations

import logging
from datetime import datetime

from scoregate.domains.exceptions import DuplicateError, NotFoundError, ValidationError
from scoregate.infrastructure.stores.base import AssignmentStore
from scoregate.models.assignment import Assignment, AssignmentFilter, AssignTeacherRequest
from scoregate.models.common import Semester
from scoregate.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for managing teacher assignments.

    Attributes:
        store: Assignment store.
    """

    def __init__(self, store: AssignmentStore) -> None:
        """Initialize assignment service.

        Args:
            store: Assignment store to read and write grants.
        """
        self.store = store

    async def assign_teacher(
        self,
        request: AssignTeacherRequest,
        assigned_by: str | None = None,
    ) -> Assignment:
        """Grant a teacher a class and subject.

        Args:
            request: Assignment request data.
            assigned_by: ID of user performing assignment.

        Returns:
            The stored assignment.

        Raises:
            ValidationError: If the request is incomplete.
            DuplicateError: If an overlapping active grant exists.
        """
        errors = []
        if not request.class_name.strip():
            errors.append("Class name is required")
        if not request.subject.strip():
            errors.append("Subject is required")
        if request.academic_year <= 0:
            errors.append("Academic year must be positive")
        if errors:
            raise ValidationError("Invalid assignment request", errors)

        existing = await self.store.find_active(
            request.teacher_id,
            AssignmentFilter(
                class_name=request.class_name,
                subject=request.subject,
                academic_year=request.academic_year,
            ),
        )
        if any(a.semester.overlaps(request.semester) for a in existing):
            raise DuplicateError(
                "Teacher is already assigned to this class with the same subject",
                {
                    "teacher_id": request.teacher_id,
                    "class_name": request.class_name,
                    "subject": request.subject,
                    "academic_year": request.academic_year,
                    "semester": request.semester.value,
                },
            )

        assignment = await self.store.add(
            Assignment(
                teacher_id=request.teacher_id,
                class_id=request.class_id,
                class_name=request.class_name,
                subject=request.subject,
                academic_year=request.academic_year,
                semester=request.semester,
                role=request.role,
                assigned_at=utc_now(),
            )
        )

        logger.info(
            "Assigned teacher: teacher=%s, class=%s, subject=%s, year=%s, semester=%s, by=%s",
            request.teacher_id,
            request.class_name,
            request.subject,
            request.academic_year,
            request.semester.value,
            assigned_by,
        )

        return assignment

    async def end_assignment(
        self,
        assignment_id: int,
        ended_by: str | None = None,
        ended_at: datetime | None = None,
    ) -> Assignment:
        """End a teacher assignment.

        The grant is kept for history and stops matching any lookup.

        Args:
            assignment_id: Assignment identifier.
            ended_by: ID of user ending assignment.
            ended_at: Optional end date, defaults to now.

        Returns:
            Updated assignment.

        Raises:
            NotFoundError: If no active assignment has this id.
        """
        assignment = await self.store.get(assignment_id)
        if assignment is None or not assignment.is_active:
            raise NotFoundError(
                f"Assignment {assignment_id} not found",
                {"assignment_id": assignment_id},
            )

        assignment.is_active = False
        assignment.ended_at = ended_at or utc_now()
        await self.store.save(assignment)

        logger.info(
            "Ended teacher assignment: id=%s, teacher=%s, class=%s, by=%s",
            assignment_id,
            assignment.teacher_id,
            assignment.class_name,
            ended_by,
        )

        return assignment

    async def get_assignment(self, assignment_id: int) -> Assignment:
        """Get assignment details.

        Raises:
            NotFoundError: If the assignment does not exist.
        """
        assignment = await self.store.get(assignment_id)
        if assignment is None:
            raise NotFoundError(
                f"Assignment {assignment_id} not found",
                {"assignment_id": assignment_id},
            )
        return assignment

    async def list_assignments(
        self,
        teacher_id: int,
        academic_year: int | None = None,
        semester: Semester | None = None,
    ) -> list[Assignment]:
        """List a teacher's active grants ordered by class and subject."""
        assignments = await self.store.find_active(
            teacher_id,
            AssignmentFilter(academic_year=academic_year, semester=semester),
        )
        return sorted(assignments, key=lambda a: (a.class_name, a.subject))
