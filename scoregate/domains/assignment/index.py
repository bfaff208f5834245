# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-only view over teacher assignments."""

from scoregate.infrastructure.stores.base import AssignmentStore
from scoregate.models.assignment import Assignment, AssignmentFilter
from scoregate.models.common import Semester


class AssignmentIndex:
    """Answers grant lookups for the authorization resolver.

    Attributes:
        store: Backing assignment store.
    """

    def __init__(self, store: AssignmentStore) -> None:
        """Initialize the index.

        Args:
            store: Assignment store to read from.
        """
        self.store = store

    async def active_for(
        self,
        teacher_id: int,
        class_name: str | None = None,
        subject: str | None = None,
        academic_year: int | None = None,
        semester: Semester | None = None,
    ) -> list[Assignment]:
        """List active grants of a teacher, optionally narrowed.

        A requested semester is also satisfied by BOTH grants.
        """
        filters = AssignmentFilter(
            class_name=class_name,
            subject=subject,
            academic_year=academic_year,
            semester=semester,
        )
        return await self.store.find_active(teacher_id, filters)

    async def has_grant(
        self,
        teacher_id: int,
        class_name: str,
        academic_year: int,
        semester: Semester,
        subject: str | None = None,
    ) -> bool:
        """Check if at least one active grant matches."""
        grants = await self.active_for(
            teacher_id,
            class_name=class_name,
            subject=subject,
            academic_year=academic_year,
            semester=semester,
        )
        return bool(grants)

    async def active_for_class_id(self, teacher_id: int, class_id: int) -> list[Assignment]:
        """List active grants of a teacher for a numeric class id."""
        assignments = await self.store.find_by_class_id(teacher_id, class_id)
        return [a for a in assignments if a.is_active]
