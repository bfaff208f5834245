# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score record models.

A score record holds one student's grades for one teacher, class, subject,
academic year and semester. Its id is derived from that tuple and its
average is always recomputed from the component, midterm and final scores.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from scoregate.models.common import Semester


class ScoreValues(BaseModel):
    """Gradable part of a score submission.

    Attributes:
        component_scores: Continuous assessment scores, in entry order.
        midterm_score: Midterm exam score.
        final_score: Final exam score.
        comment: Teacher comment.
    """

    component_scores: list[int] = Field(default_factory=list)
    midterm_score: int = 0
    final_score: int = 0
    comment: str | None = None


class ScoreInput(ScoreValues):
    """Full score submission for creation.

    Identity fields are optional at the type level so that missing values
    are reported together with range errors instead of failing on parse.
    There is no average field: the average is always derived.
    """

    teacher_id: int | None = None
    student_id: int | None = None
    class_name: str | None = None
    subject: str | None = None
    academic_year: int | None = None
    semester: Semester | None = None


class ScoreUpdateItem(ScoreValues):
    """One element of a batch update."""

    score_id: str


class ScoreRecord(BaseModel):
    """Persisted score record.

    Attributes:
        id: Composite key derived from the identity tuple.
        teacher_id: Owning teacher.
        student_id: Graded student.
        class_name: Class name.
        subject: Subject.
        academic_year: Academic year.
        semester: Concrete semester.
        component_scores: Continuous assessment scores.
        midterm_score: Midterm exam score.
        final_score: Final exam score.
        average: Weighted average, one decimal place.
        comment: Teacher comment.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: str
    teacher_id: int
    student_id: int
    class_name: str
    subject: str
    academic_year: int
    semester: Semester
    component_scores: list[int] = Field(default_factory=list)
    midterm_score: int = 0
    final_score: int = 0
    average: float = 0.0
    comment: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BatchFailure(BaseModel):
    """Why one element of a batch was rejected."""

    index: int
    score_id: str | None = None
    error_kind: str
    message: str


class BatchResult(BaseModel):
    """Partitioned outcome of a batch mutation.

    Partial success is a normal outcome: failed elements never abort the
    others.
    """

    succeeded: list[ScoreRecord] = Field(default_factory=list)
    deleted_ids: list[str] = Field(default_factory=list)
    failed: list[BatchFailure] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        """Number of elements that went through."""
        return len(self.succeeded) + len(self.deleted_ids)

    @property
    def failure_count(self) -> int:
        """Number of rejected elements."""
        return len(self.failed)


class ClassScoreSummary(BaseModel):
    """Aggregate view of one class/subject/year/semester score sheet."""

    class_name: str
    subject: str
    academic_year: int
    semester: Semester
    student_count: int
    average: float
    top_scores: list[ScoreRecord] = Field(default_factory=list)
