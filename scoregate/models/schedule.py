# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule window models.

A schedule window is the period during which teachers may write scores for
one class, academic year and semester.
"""

from datetime import datetime

from pydantic import BaseModel, field_validator

from scoregate.models.common import Semester, WindowState
from scoregate.utils.datetime import ensure_utc


class ScheduleWindow(BaseModel):
    """Time-boxed score entry window.

    Attributes:
        id: Store-assigned identifier.
        name: Display name of the window.
        class_name: Class the window applies to.
        academic_year: Academic year.
        semester: Concrete semester.
        start_time: First instant at which entry is allowed.
        end_time: Last instant at which entry is allowed.
        is_active: Inactive windows are ignored by every query.
        is_locked: Terminal lock flag; never goes back to False.
        created_by: Administrator who created the window.
        description: Free-form description.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: int | None = None
    name: str
    class_name: str
    academic_year: int
    semester: Semester
    start_time: datetime
    end_time: datetime
    is_active: bool = True
    is_locked: bool = False
    created_by: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("start_time", "end_time", "created_at", "updated_at", mode="after")
    @classmethod
    def normalize_utc(cls, value: datetime | None) -> datetime | None:
        # Naive values are UTC
        return ensure_utc(value)

    def intersects(self, start_time: datetime, end_time: datetime) -> bool:
        """Closed-interval intersection with another time range."""
        return self.start_time <= end_time and self.end_time >= start_time


class ScheduleWindowCreate(BaseModel):
    """Request to open a new score entry window."""

    name: str
    class_name: str
    academic_year: int
    semester: Semester
    start_time: datetime
    end_time: datetime
    created_by: str | None = None
    description: str | None = None


class ScheduleWindowUpdate(BaseModel):
    """Partial update of a schedule window.

    The lock flag is deliberately absent: a locked window stays locked.
    """

    name: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool | None = None
    description: str | None = None


class EntryPermission(BaseModel):
    """Answer to "may scores be entered right now" for one class tuple."""

    is_allowed: bool
    class_name: str
    academic_year: int
    semester: Semester
    evaluated_at: datetime
    state: WindowState | None = None
    window: ScheduleWindow | None = None
