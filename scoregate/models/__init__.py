# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models shared across the Score Gate domains."""

from scoregate.models.assignment import Assignment, AssignmentFilter, AssignTeacherRequest
from scoregate.models.common import AssignmentRole, Semester, WindowState
from scoregate.models.schedule import (
    EntryPermission,
    ScheduleWindow,
    ScheduleWindowCreate,
    ScheduleWindowUpdate,
)
from scoregate.models.score import (
    BatchFailure,
    BatchResult,
    ClassScoreSummary,
    ScoreInput,
    ScoreRecord,
    ScoreUpdateItem,
    ScoreValues,
)

__all__ = [
    # Enums
    "Semester",
    "AssignmentRole",
    "WindowState",
    # Assignments
    "Assignment",
    "AssignmentFilter",
    "AssignTeacherRequest",
    # Schedule
    "ScheduleWindow",
    "ScheduleWindowCreate",
    "ScheduleWindowUpdate",
    "EntryPermission",
    # Scores
    "ScoreValues",
    "ScoreInput",
    "ScoreUpdateItem",
    "ScoreRecord",
    "BatchFailure",
    "BatchResult",
    "ClassScoreSummary",
]
