# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

Unit tests run against the in-memory stores with a frozen clock. The
reference scenario is teacher 7 teaching "Tin học" in class "10A2" for
academic year 2024, semester 1, with a window open all day.
"""

from datetime import datetime, timezone

import pytest

from scoregate.core.config.settings import ScoreSettings
from scoregate.domains.assignment.index import AssignmentIndex
from scoregate.domains.assignment.resolver import AuthorizationResolver
from scoregate.domains.schedule.gate import ScheduleGate
from scoregate.domains.schedule.registry import ScheduleRegistry
from scoregate.domains.score.service import ScoreMutationService
from scoregate.infrastructure.stores.memory import (
    InMemoryAssignmentStore,
    InMemoryRosterLookup,
    InMemoryScheduleStore,
    InMemoryScoreStore,
)
from scoregate.models.assignment import Assignment
from scoregate.models.common import Semester
from scoregate.models.schedule import ScheduleWindow

NOW = datetime(2024, 10, 15, 9, 30, tzinfo=timezone.utc)
TEACHER_ID = 7
CLASS_ID = 102
CLASS_NAME = "10A2"
SUBJECT = "Tin học"
YEAR = 2024


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Clock Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """Frozen evaluation time."""
    return NOW


@pytest.fixture
def clock(now):
    """Clock returning the frozen time."""
    return lambda: now


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def sample_assignment() -> Assignment:
    """Teacher 7 granted Tin học in 10A2 for semester 1."""
    return Assignment(
        teacher_id=TEACHER_ID,
        class_id=CLASS_ID,
        class_name=CLASS_NAME,
        subject=SUBJECT,
        academic_year=YEAR,
        semester=Semester.FIRST,
        assigned_at=NOW,
    )


@pytest.fixture
def open_window() -> ScheduleWindow:
    """Window covering the whole day of NOW."""
    return ScheduleWindow(
        name="Semester 1 entry",
        class_name=CLASS_NAME,
        academic_year=YEAR,
        semester=Semester.FIRST,
        start_time=NOW.replace(hour=0, minute=0),
        end_time=NOW.replace(hour=23, minute=59),
        created_by="admin",
    )


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def assignment_store(sample_assignment) -> InMemoryAssignmentStore:
    """Assignment store seeded with the sample assignment."""
    return InMemoryAssignmentStore([sample_assignment])


@pytest.fixture
def score_store() -> InMemoryScoreStore:
    """Empty score store."""
    return InMemoryScoreStore()


@pytest.fixture
def schedule_store(open_window) -> InMemoryScheduleStore:
    """Schedule store seeded with the open window."""
    return InMemoryScheduleStore([open_window])


@pytest.fixture
def roster() -> InMemoryRosterLookup:
    """Roster with student 42 in class 10A2."""
    lookup = InMemoryRosterLookup()
    lookup.enroll(42, CLASS_ID, YEAR)
    return lookup


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def resolver(assignment_store, score_store, roster) -> AuthorizationResolver:
    """Authorization resolver over the in-memory stores."""
    return AuthorizationResolver(AssignmentIndex(assignment_store), score_store, roster)


@pytest.fixture
def gate(schedule_store, clock) -> ScheduleGate:
    """Schedule gate with the frozen clock."""
    return ScheduleGate(ScheduleRegistry(schedule_store), clock=clock)


@pytest.fixture
def score_settings() -> ScoreSettings:
    """Default score policy."""
    return ScoreSettings()


@pytest.fixture
def score_service(resolver, gate, score_store, score_settings, clock) -> ScoreMutationService:
    """Score mutation service wired on the in-memory stores."""
    return ScoreMutationService(resolver, gate, score_store, settings=score_settings, clock=clock)
