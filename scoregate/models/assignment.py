# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment models.

An assignment grants one teacher the right to teach one subject in one
class for one academic year and semester (or both semesters).
"""

from datetime import datetime

from pydantic import BaseModel, Field

from scoregate.models.common import AssignmentRole, Semester


class Assignment(BaseModel):
    """A teacher grant for class + subject + year + semester.

    Attributes:
        id: Store-assigned identifier.
        teacher_id: Granted teacher.
        class_id: Numeric class key.
        class_name: Human-readable class name (e.g. "10A2").
        subject: Subject taught.
        academic_year: Academic year (e.g. 2024).
        semester: Granted semester, BOTH for the whole year.
        role: Teacher role in the class.
        is_active: False once the grant has been revoked.
        assigned_at: When the grant was created.
        ended_at: When the grant was revoked.
    """

    id: int | None = None
    teacher_id: int
    class_id: int
    class_name: str
    subject: str
    academic_year: int
    semester: Semester
    role: AssignmentRole = AssignmentRole.SUBJECT
    is_active: bool = True
    assigned_at: datetime | None = None
    ended_at: datetime | None = None


class AssignTeacherRequest(BaseModel):
    """Request to grant a teacher a class/subject for a year."""

    teacher_id: int
    class_id: int
    class_name: str
    subject: str
    academic_year: int
    semester: Semester = Semester.BOTH
    role: AssignmentRole = AssignmentRole.SUBJECT


class AssignmentFilter(BaseModel):
    """Optional narrowing of an active-assignment lookup.

    Every field left as None matches any value.
    """

    class_name: str | None = None
    subject: str | None = None
    academic_year: int | None = None
    semester: Semester | None = Field(
        default=None,
        description="Requested concrete semester; BOTH grants always match.",
    )

    def matches(self, assignment: Assignment) -> bool:
        """Check whether an assignment satisfies this filter."""
        if self.class_name is not None and assignment.class_name != self.class_name:
            return False
        if self.subject is not None and assignment.subject != self.subject:
            return False
        if self.academic_year is not None and assignment.academic_year != self.academic_year:
            return False
        if self.semester is not None and not assignment.semester.covers(self.semester):
            return False
        return True
