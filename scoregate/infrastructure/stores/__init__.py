# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Store contracts and in-memory implementations."""

from scoregate.infrastructure.stores.base import (
    AssignmentStore,
    RosterLookup,
    ScheduleStore,
    ScoreStore,
)
from scoregate.infrastructure.stores.memory import (
    Enrollment,
    InMemoryAssignmentStore,
    InMemoryRosterLookup,
    InMemoryScheduleStore,
    InMemoryScoreStore,
)

__all__ = [
    "AssignmentStore",
    "ScoreStore",
    "ScheduleStore",
    "RosterLookup",
    "Enrollment",
    "InMemoryAssignmentStore",
    "InMemoryScoreStore",
    "InMemoryScheduleStore",
    "InMemoryRosterLookup",
]
