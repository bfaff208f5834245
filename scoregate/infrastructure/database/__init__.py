# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy persistence for the Score Gate stores."""

from scoregate.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_schema,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from scoregate.infrastructure.database.stores import (
    SqlAssignmentStore,
    SqlRosterLookup,
    SqlScheduleStore,
    SqlScoreStore,
)
from scoregate.infrastructure.database.tables import (
    AssignmentRow,
    Base,
    EnrollmentRow,
    ScheduleWindowRow,
    ScoreRow,
)

__all__ = [
    # Connection
    "DatabaseError",
    "init_database",
    "close_database",
    "get_engine",
    "get_sessionmaker",
    "get_session",
    "check_database_connection",
    "create_schema",
    # Tables
    "Base",
    "AssignmentRow",
    "ScoreRow",
    "ScheduleWindowRow",
    "EnrollmentRow",
    # Stores
    "SqlAssignmentStore",
    "SqlScoreStore",
    "SqlScheduleStore",
    "SqlRosterLookup",
]
