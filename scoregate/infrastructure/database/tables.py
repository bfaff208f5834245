# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM tables backing the production stores.

Tables:
- teacher_assignments: teacher grants, soft-deactivated on removal
- score_records: score rows keyed by the derived composite id
- schedule_windows: score entry windows
- student_enrollments: class rosters
"""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import Index, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all Score Gate tables."""


class AssignmentRow(Base):
    """Teacher grant row.

    A partial unique index keeps at most one active grant per
    teacher/class/subject/year/semester tuple.
    """

    __tablename__ = "teacher_assignments"

    id: Mapped[int] = mapped_column(sa.BigInteger, primary_key=True, autoincrement=True)
    teacher_id: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    class_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    subject: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    academic_year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    semester: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    role: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, server_default=text("true")
    )
    assigned_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )
    ended_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True))

    __table_args__ = (
        Index(
            "uq_active_teacher_assignment",
            "teacher_id",
            "class_name",
            "subject",
            "academic_year",
            "semester",
            unique=True,
            postgresql_where=text("is_active"),
        ),
    )


class ScoreRow(Base):
    """Score record row. The primary key is the derived composite id."""

    __tablename__ = "score_records"

    id: Mapped[str] = mapped_column(sa.String(500), primary_key=True)
    teacher_id: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, index=True)
    student_id: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, index=True)
    class_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    subject: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    academic_year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    semester: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    component_scores: Mapped[list[int]] = mapped_column(sa.JSON, nullable=False, default=list)
    midterm_score: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    final_score: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    average: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    comment: Mapped[str | None] = mapped_column(sa.Text)
    created_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()
    )

    __table_args__ = (
        Index(
            "ix_score_records_sheet",
            "class_name",
            "subject",
            "academic_year",
            "semester",
        ),
    )


class ScheduleWindowRow(Base):
    """Score entry window row."""

    __tablename__ = "schedule_windows"

    id: Mapped[int] = mapped_column(sa.BigInteger, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    class_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    academic_year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    semester: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    start_time: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, server_default=text("true")
    )
    is_locked: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, server_default=text("false")
    )
    created_by: Mapped[str | None] = mapped_column(sa.String(255))
    description: Mapped[str | None] = mapped_column(sa.Text)
    created_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()
    )

    __table_args__ = (
        Index(
            "ix_schedule_windows_tuple",
            "class_name",
            "academic_year",
            "semester",
        ),
        sa.CheckConstraint("start_time < end_time", name="ck_schedule_window_duration"),
    )


class EnrollmentRow(Base):
    """Student membership in a class for a year and semester."""

    __tablename__ = "student_enrollments"

    id: Mapped[int] = mapped_column(sa.BigInteger, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, index=True)
    academic_year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    semester: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, server_default=text("true")
    )
