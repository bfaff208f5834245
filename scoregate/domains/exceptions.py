# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception hierarchy for score mutation decisions.

- ScoreGateError: Base exception for all rule-engine errors
- ValidationError: Malformed or out-of-range input
- AuthorizationError: Missing grant or ownership
- ScheduleRestrictionError: No open entry window for the class tuple
- NotFoundError: Referenced record absent
- DuplicateError: Identity collision on create
- OverlapError: Conflicting schedule window

Every error carries a stable ``kind`` string that the HTTP layer maps to a
status code. None of them is retried internally.
"""

from typing import Any


class ScoreGateError(Exception):
    """Base exception for all Score Gate errors.

    Attributes:
        kind: Stable machine-readable error kind.
        message: Human-readable error description.
        details: Identifying context (ids, tuple fields).
    """

    kind = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(ScoreGateError):
    """Input is malformed or out of range.

    Attributes:
        errors: Every individual violation found.
    """

    kind = "validation"

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.errors = errors or [message]
        super().__init__(message, details)


class AuthorizationError(ScoreGateError):
    """Teacher lacks the required grant or ownership."""

    kind = "authorization"


class ScheduleRestrictionError(ScoreGateError):
    """Score entry is not open for the class, year and semester.

    Attributes:
        class_name: Class of the rejected mutation.
        academic_year: Academic year of the rejected mutation.
        semester: Semester token of the rejected mutation.
    """

    kind = "schedule_restriction"

    def __init__(
        self,
        class_name: str,
        academic_year: int,
        semester: str,
        message: str | None = None,
    ):
        self.class_name = class_name
        self.academic_year = academic_year
        self.semester = semester
        super().__init__(
            message
            or (
                f"Score entry is closed for class {class_name}, "
                f"year {academic_year}, semester {semester}"
            ),
            {
                "class_name": class_name,
                "academic_year": academic_year,
                "semester": semester,
            },
        )


class NotFoundError(ScoreGateError):
    """Referenced score, window or assignment does not exist."""

    kind = "not_found"


class DuplicateError(ScoreGateError):
    """A record with the same identity already exists."""

    kind = "duplicate"


class OverlapError(ScoreGateError):
    """An active schedule window already covers part of the requested range."""

    kind = "overlap"
