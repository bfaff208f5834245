# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score mutation service.

This module provides the ScoreMutationService class that gates every score
write behind authorization, ownership and the schedule:

create:  validate -> class grant -> subject grant -> open window -> insert
update:  load -> ownership -> [grant] -> open window -> validate -> save
delete:  load -> ownership -> [grant] -> open window -> delete

Checks fail fast with the first violated rule. The bracketed grant check
runs only when ``ScoreSettings.reverify_assignment_on_mutation`` is set.
The schedule check on update and delete uses the tuple of the stored
record, never the caller's.
"""

from __future__ import annotations

import logging
from datetime import datetime
from fractions import Fraction
from typing import Callable, Sequence

from scoregate.core.config.settings import ScoreSettings
from scoregate.domains.assignment.resolver import AuthorizationResolver
from scoregate.domains.exceptions import (
    AuthorizationError,
    NotFoundError,
    ScheduleRestrictionError,
    ScoreGateError,
    ValidationError,
)
from scoregate.domains.schedule.gate import ScheduleGate
from scoregate.domains.score.derivation import (
    compute_average,
    round_half_up,
    validate_score_input,
    validate_scores,
)
from scoregate.domains.score.identity import compute_id
from scoregate.infrastructure.stores.base import ScoreStore
from scoregate.models.common import Semester
from scoregate.models.score import (
    BatchFailure,
    BatchResult,
    ClassScoreSummary,
    ScoreInput,
    ScoreRecord,
    ScoreUpdateItem,
    ScoreValues,
)
from scoregate.utils.datetime import utc_now

logger = logging.getLogger(__name__)

TOP_SCORES_LIMIT = 5


class ScoreMutationService:
    """Orchestrates create, update and delete of score records.

    Attributes:
        resolver: Authorization resolver.
        gate: Schedule gate.
        store: Score store.
        settings: Score policy settings.
    """

    def __init__(
        self,
        resolver: AuthorizationResolver,
        gate: ScheduleGate,
        store: ScoreStore,
        settings: ScoreSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the service.

        Args:
            resolver: Authorization resolver.
            gate: Schedule gate.
            store: Score store.
            settings: Score policy settings, defaults apply when omitted.
            clock: Source of "now" for gating and timestamps.
        """
        self.resolver = resolver
        self.gate = gate
        self.store = store
        self.settings = settings or ScoreSettings()
        self._clock = clock

    async def create_score(
        self,
        data: ScoreInput,
        requesting_teacher_id: int,
        now: datetime | None = None,
    ) -> ScoreRecord:
        """Create a score record.

        Args:
            data: Score submission. ``teacher_id`` may be omitted; if given it
                must match the requester.
            requesting_teacher_id: Authenticated teacher.
            now: Evaluation time, defaults to the service clock.

        Returns:
            The stored record.

        Raises:
            ValidationError: If fields are missing or scores are out of range.
            AuthorizationError: If the teacher lacks the class or subject grant.
            ScheduleRestrictionError: If no window is open for the tuple.
            DuplicateError: If a record with the same id exists.
        """
        errors = validate_score_input(data)
        if errors:
            raise ValidationError("Invalid score input", errors)

        if data.teacher_id is not None and data.teacher_id != requesting_teacher_id:
            raise AuthorizationError(
                "Teachers can only create scores in their own name",
                {
                    "teacher_id": data.teacher_id,
                    "requesting_teacher_id": requesting_teacher_id,
                },
            )

        if not await self.resolver.can_access_class(
            requesting_teacher_id, data.class_name, data.academic_year, data.semester
        ):
            raise AuthorizationError(
                f"Teacher is not assigned to class {data.class_name}",
                {
                    "teacher_id": requesting_teacher_id,
                    "class_name": data.class_name,
                    "academic_year": data.academic_year,
                    "semester": data.semester.value,
                },
            )

        if not await self.resolver.is_authorized_for_subject(
            requesting_teacher_id,
            data.class_name,
            data.subject,
            data.academic_year,
            data.semester,
        ):
            raise AuthorizationError(
                f"Teacher is not assigned to teach {data.subject} in class {data.class_name}",
                {
                    "teacher_id": requesting_teacher_id,
                    "class_name": data.class_name,
                    "subject": data.subject,
                },
            )

        now = now or self._clock()
        await self._require_open(data.class_name, data.academic_year, data.semester, now)

        record = ScoreRecord(
            id=compute_id(
                requesting_teacher_id,
                data.student_id,
                data.class_name,
                data.subject,
                data.academic_year,
                data.semester,
            ),
            teacher_id=requesting_teacher_id,
            student_id=data.student_id,
            class_name=data.class_name,
            subject=data.subject,
            academic_year=data.academic_year,
            semester=data.semester,
            component_scores=list(data.component_scores),
            midterm_score=data.midterm_score,
            final_score=data.final_score,
            average=compute_average(
                data.component_scores, data.midterm_score, data.final_score
            ),
            comment=data.comment,
            created_at=now,
            updated_at=now,
        )
        stored = await self.store.insert(record)

        logger.info(
            "Created score: id=%s, teacher=%s, average=%s",
            stored.id,
            requesting_teacher_id,
            stored.average,
        )
        return stored

    async def update_score(
        self,
        score_id: str,
        values: ScoreValues,
        requesting_teacher_id: int,
        now: datetime | None = None,
    ) -> ScoreRecord:
        """Replace the grades of an existing record.

        Identity fields cannot change; only scores and comment are taken
        from ``values``.

        Checks run in order and the first failure wins.

        Raises:
            NotFoundError: If the record does not exist.
            AuthorizationError: If the requester does not own the record.
            ScheduleRestrictionError: If the record's window is not open.
            ValidationError: If scores are out of range.
        """
        now = now or self._clock()
        existing = await self._load_for_mutation(score_id, requesting_teacher_id, now)
        validate_scores(values.component_scores, values.midterm_score, values.final_score)

        existing.component_scores = list(values.component_scores)
        existing.midterm_score = values.midterm_score
        existing.final_score = values.final_score
        existing.average = compute_average(
            values.component_scores, values.midterm_score, values.final_score
        )
        existing.comment = values.comment
        existing.updated_at = now
        stored = await self.store.save(existing)

        logger.info(
            "Updated score: id=%s, teacher=%s, average=%s",
            score_id,
            requesting_teacher_id,
            stored.average,
        )
        return stored

    async def delete_score(
        self,
        score_id: str,
        requesting_teacher_id: int,
        now: datetime | None = None,
    ) -> None:
        """Delete a record owned by the requester.

        Raises:
            NotFoundError: If the record does not exist.
            AuthorizationError: If the requester does not own the record.
            ScheduleRestrictionError: If the record's window is not open.
        """
        await self._load_for_mutation(score_id, requesting_teacher_id, now or self._clock())
        await self.store.delete(score_id)
        logger.info("Deleted score: id=%s, teacher=%s", score_id, requesting_teacher_id)

    async def get_score(self, score_id: str, requesting_teacher_id: int) -> ScoreRecord:
        """Read a record owned by the requester.

        Raises:
            NotFoundError: If the record does not exist.
            AuthorizationError: If the requester does not own the record.
        """
        record = await self._get_or_raise(score_id)
        self._check_owner(record, requesting_teacher_id)
        return record

    async def create_scores(
        self,
        items: Sequence[ScoreInput],
        requesting_teacher_id: int,
        now: datetime | None = None,
    ) -> BatchResult:
        """Create many records; each element is gated on its own."""
        now = now or self._clock()
        result = BatchResult()
        for index, item in enumerate(items):
            try:
                result.succeeded.append(
                    await self.create_score(item, requesting_teacher_id, now)
                )
            except ScoreGateError as e:
                result.failed.append(
                    self._failure(index, self._candidate_id(item, requesting_teacher_id), e)
                )
        self._log_batch("create", requesting_teacher_id, result)
        return result

    async def update_scores(
        self,
        items: Sequence[ScoreUpdateItem],
        requesting_teacher_id: int,
        now: datetime | None = None,
    ) -> BatchResult:
        """Update many records; each element is gated on its own."""
        now = now or self._clock()
        result = BatchResult()
        for index, item in enumerate(items):
            try:
                result.succeeded.append(
                    await self.update_score(item.score_id, item, requesting_teacher_id, now)
                )
            except ScoreGateError as e:
                result.failed.append(self._failure(index, item.score_id, e))
        self._log_batch("update", requesting_teacher_id, result)
        return result

    async def delete_scores(
        self,
        score_ids: Sequence[str],
        requesting_teacher_id: int,
        now: datetime | None = None,
    ) -> BatchResult:
        """Delete many records; each element is gated on its own."""
        now = now or self._clock()
        result = BatchResult()
        for index, score_id in enumerate(score_ids):
            try:
                await self.delete_score(score_id, requesting_teacher_id, now)
                result.deleted_ids.append(score_id)
            except ScoreGateError as e:
                result.failed.append(self._failure(index, score_id, e))
        self._log_batch("delete", requesting_teacher_id, result)
        return result

    async def get_class_summary(
        self,
        teacher_id: int,
        class_name: str,
        subject: str,
        academic_year: int,
        semester: Semester,
    ) -> ClassScoreSummary:
        """Summarize one class score sheet.

        Raises:
            AuthorizationError: If the teacher lacks the subject grant.
        """
        if not await self.resolver.is_authorized_for_subject(
            teacher_id, class_name, subject, academic_year, semester
        ):
            raise AuthorizationError(
                f"Teacher is not assigned to teach {subject} in class {class_name}",
                {"teacher_id": teacher_id, "class_name": class_name, "subject": subject},
            )

        records = await self.store.list_for_class(class_name, subject, academic_year, semester)
        average = 0.0
        if records:
            total = sum((Fraction(str(r.average)) for r in records), Fraction(0))
            average = round_half_up(total / len(records))

        top_scores = sorted(records, key=lambda r: (-r.average, r.student_id))
        return ClassScoreSummary(
            class_name=class_name,
            subject=subject,
            academic_year=academic_year,
            semester=semester,
            student_count=len({r.student_id for r in records}),
            average=average,
            top_scores=top_scores[:TOP_SCORES_LIMIT],
        )

    async def _load_for_mutation(
        self,
        score_id: str,
        requesting_teacher_id: int,
        now: datetime,
    ) -> ScoreRecord:
        """Load a record and run the update/delete gate on it."""
        record = await self._get_or_raise(score_id)
        self._check_owner(record, requesting_teacher_id)

        if self.settings.reverify_assignment_on_mutation and not (
            await self.resolver.is_authorized_for_subject(
                requesting_teacher_id,
                record.class_name,
                record.subject,
                record.academic_year,
                record.semester,
            )
        ):
            raise AuthorizationError(
                "Teacher assignment for this score is no longer active",
                {"score_id": score_id, "teacher_id": requesting_teacher_id},
            )

        await self._require_open(record.class_name, record.academic_year, record.semester, now)
        return record

    async def _get_or_raise(self, score_id: str) -> ScoreRecord:
        record = await self.store.get_by_id(score_id)
        if record is None:
            raise NotFoundError(f"Score {score_id} not found", {"score_id": score_id})
        return record

    def _check_owner(self, record: ScoreRecord, requesting_teacher_id: int) -> None:
        if record.teacher_id != requesting_teacher_id:
            raise AuthorizationError(
                "Teachers can only modify their own scores",
                {"score_id": record.id, "teacher_id": requesting_teacher_id},
            )

    async def _require_open(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        now: datetime,
    ) -> None:
        if not await self.gate.is_entry_allowed(class_name, academic_year, semester, now):
            raise ScheduleRestrictionError(class_name, academic_year, semester.value)

    def _candidate_id(self, item: ScoreInput, requesting_teacher_id: int) -> str | None:
        if (
            item.student_id is None
            or not item.class_name
            or not item.subject
            or item.academic_year is None
            or item.semester is None
        ):
            return None
        return compute_id(
            requesting_teacher_id,
            item.student_id,
            item.class_name,
            item.subject,
            item.academic_year,
            item.semester,
        )

    def _failure(self, index: int, score_id: str | None, error: ScoreGateError) -> BatchFailure:
        return BatchFailure(
            index=index,
            score_id=score_id,
            error_kind=error.kind,
            message=error.message,
        )

    def _log_batch(self, operation: str, teacher_id: int, result: BatchResult) -> None:
        logger.info(
            "Batch %s: teacher=%s, succeeded=%d, failed=%d",
            operation,
            teacher_id,
            result.success_count,
            result.failure_count,
        )
