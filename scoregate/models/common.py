# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enumerations for assignments, schedule windows and scores."""

from enum import Enum


class Semester(str, Enum):
    """Semester of an academic year.

    Score records and schedule windows always carry a concrete semester
    (FIRST or SECOND). BOTH only appears on grants and roster enrollments
    and covers the whole year.
    """

    FIRST = "1"
    SECOND = "2"
    BOTH = "BOTH"

    @property
    def is_concrete(self) -> bool:
        """Whether this is a single semester rather than the whole year."""
        return self is not Semester.BOTH

    def covers(self, requested: "Semester") -> bool:
        """Check if a grant for this semester satisfies a request.

        Args:
            requested: Semester the caller wants to act on.

        Returns:
            True if equal, or if this grant spans both semesters.
        """
        return self is Semester.BOTH or self is requested

    def overlaps(self, other: "Semester") -> bool:
        """Check if two grant semesters share at least one concrete semester."""
        return self is Semester.BOTH or other is Semester.BOTH or self is other


class AssignmentRole(str, Enum):
    """Role a teacher holds in a class for one subject."""

    PRIMARY = "primary"
    SUBJECT = "subject"
    ASSISTANT = "assistant"
    SUBSTITUTE = "substitute"


class WindowState(str, Enum):
    """Evaluated state of a schedule window at a point in time.

    - PENDING: now is before the window start
    - OPEN: start <= now <= end, active and not locked
    - LOCKED: locked by sweep or administrator (terminal)
    - INACTIVE: deactivated, ignored by every query
    """

    PENDING = "pending"
    OPEN = "open"
    LOCKED = "locked"
    INACTIVE = "inactive"
