# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authorization resolver for teacher access to classes, subjects and students.

Every answer is derived from active assignments only. There is no admin
bypass: a caller holding a broader capability checks it before asking the
resolver.

Example:
    resolver = AuthorizationResolver(index, score_store, roster)
    if not await resolver.can_access_class(7, "10A2", 2024, Semester.FIRST):
        raise AuthorizationError("...")
"""

import logging

from scoregate.domains.assignment.index import AssignmentIndex
from scoregate.infrastructure.stores.base import RosterLookup, ScoreStore
from scoregate.models.assignment import Assignment
from scoregate.models.common import Semester

logger = logging.getLogger(__name__)


class AuthorizationResolver:
    """Maps a teacher to the classes, subjects and students they may touch."""

    def __init__(
        self,
        index: AssignmentIndex,
        score_store: ScoreStore,
        roster: RosterLookup,
    ) -> None:
        """Initialize the resolver.

        Args:
            index: Assignment index.
            score_store: Used to resolve a score id to its class tuple.
            roster: Used to resolve student membership in classes.
        """
        self.index = index
        self.score_store = score_store
        self.roster = roster

    async def can_access_class(
        self,
        teacher_id: int,
        class_name: str,
        academic_year: int,
        semester: Semester,
    ) -> bool:
        """Check if the teacher holds any active grant for the class.

        Args:
            teacher_id: Teacher identifier.
            class_name: Class name.
            academic_year: Academic year.
            semester: Requested semester; BOTH grants also match.

        Returns:
            True if at least one active grant matches.
        """
        return await self.index.has_grant(teacher_id, class_name, academic_year, semester)

    async def can_access_class_by_id(self, teacher_id: int, class_id: int) -> bool:
        """Check if the teacher holds any active grant for a class id."""
        return bool(await self.index.active_for_class_id(teacher_id, class_id))

    async def is_authorized_for_subject(
        self,
        teacher_id: int,
        class_name: str,
        subject: str,
        academic_year: int,
        semester: Semester,
    ) -> bool:
        """Check if the teacher holds an active grant for the class and subject.

        Args:
            teacher_id: Teacher identifier.
            class_name: Class name.
            subject: Subject, compared exactly.
            academic_year: Academic year.
            semester: Requested semester; BOTH grants also match.

        Returns:
            True if a matching grant exists.
        """
        return await self.index.has_grant(
            teacher_id, class_name, academic_year, semester, subject=subject
        )

    async def can_modify_score(self, teacher_id: int, score_id: str) -> bool:
        """Check class access for the tuple of an existing score.

        Returns:
            False if the score does not exist.
        """
        record = await self.score_store.get_by_id(score_id)
        if record is None:
            return False
        return await self.can_access_class(
            teacher_id, record.class_name, record.academic_year, record.semester
        )

    async def accessible_classes(
        self,
        teacher_id: int,
        academic_year: int,
        semester: Semester,
    ) -> set[str]:
        """Class names the teacher holds a grant for in a year and semester."""
        grants = await self.index.active_for(
            teacher_id, academic_year=academic_year, semester=semester
        )
        return {a.class_name for a in grants}

    async def can_access_student(
        self,
        teacher_id: int,
        student_id: int,
        academic_year: int,
        semester: Semester,
    ) -> bool:
        """Check if the student sits in any class the teacher is granted.

        Args:
            teacher_id: Teacher identifier.
            student_id: Student identifier.
            academic_year: Academic year.
            semester: Requested semester.

        Returns:
            True if the student is enrolled in one of the granted classes.
        """
        grants = await self.index.active_for(
            teacher_id, academic_year=academic_year, semester=semester
        )
        class_ids = {a.class_id for a in grants}
        for class_id in class_ids:
            if await self.roster.is_student_in_class(
                student_id, class_id, academic_year, semester
            ):
                return True

        logger.debug(
            "Student not reachable: teacher=%s, student=%s, year=%s, semester=%s",
            teacher_id,
            student_id,
            academic_year,
            semester.value,
        )
        return False

    async def teacher_assignments(self, teacher_id: int) -> list[Assignment]:
        """All active grants of a teacher."""
        return await self.index.active_for(teacher_id)
