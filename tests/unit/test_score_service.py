# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the score mutation service."""

import asyncio
from datetime import timedelta

import pytest

from scoregate.core.config.settings import ScoreSettings
from scoregate.domains.assignment.service import AssignmentService
from scoregate.domains.exceptions import (
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ScheduleRestrictionError,
    ValidationError,
)
from scoregate.domains.score.service import ScoreMutationService
from scoregate.models.assignment import AssignTeacherRequest
from scoregate.models.common import Semester
from scoregate.models.score import ScoreInput, ScoreUpdateItem, ScoreValues

SCORE_ID = "7_42_10a2_tinhoc_2024_1"


def make_input(**overrides) -> ScoreInput:
    """Build the reference submission with overrides."""
    data = {
        "teacher_id": 7,
        "student_id": 42,
        "class_name": "10A2",
        "subject": "Tin học",
        "academic_year": 2024,
        "semester": Semester.FIRST,
        "component_scores": [8, 9],
        "midterm_score": 7,
        "final_score": 8,
    }
    data.update(overrides)
    return ScoreInput(**data)


class TestCreateScore:
    """Tests for create_score."""

    @pytest.mark.asyncio
    async def test_reference_scenario(self, score_service, score_store, now) -> None:
        """Test the reference submission is stored with its derived fields."""
        record = await score_service.create_score(make_input(), requesting_teacher_id=7)

        assert record.id == SCORE_ID
        assert record.average == 7.8
        assert record.teacher_id == 7
        assert record.created_at == now
        assert record.updated_at == now

        stored = await score_store.get_by_id(SCORE_ID)
        assert stored == record

    @pytest.mark.asyncio
    async def test_teacher_id_defaults_to_requester(self, score_service) -> None:
        """Test the record owner is always the requesting teacher."""
        record = await score_service.create_score(make_input(teacher_id=None), 7)

        assert record.teacher_id == 7

    @pytest.mark.asyncio
    async def test_teacher_id_mismatch(self, score_service) -> None:
        """Test a teacher cannot create scores in another teacher's name."""
        with pytest.raises(AuthorizationError):
            await score_service.create_score(make_input(teacher_id=8), 7)

    @pytest.mark.asyncio
    async def test_unassigned_teacher(self, score_service) -> None:
        """Test teacher 9 without a grant is rejected."""
        with pytest.raises(AuthorizationError):
            await score_service.create_score(make_input(teacher_id=9), 9)

    @pytest.mark.asyncio
    async def test_other_subject_in_granted_class(self, score_service) -> None:
        """Test class access alone does not allow another subject."""
        with pytest.raises(AuthorizationError) as exc_info:
            await score_service.create_score(make_input(subject="Toán"), 7)

        assert exc_info.value.details["subject"] == "Toán"

    @pytest.mark.asyncio
    async def test_expired_window(self, score_service, now) -> None:
        """Test a submission after the window end is rejected with the tuple."""
        with pytest.raises(ScheduleRestrictionError) as exc_info:
            await score_service.create_score(make_input(), 7, now=now + timedelta(days=1))

        error = exc_info.value
        assert error.kind == "schedule_restriction"
        assert error.class_name == "10A2"
        assert error.academic_year == 2024
        assert error.semester == "1"

    @pytest.mark.asyncio
    async def test_no_window_for_semester(self, score_service, assignment_store) -> None:
        """Test a granted semester without a window is closed."""
        await AssignmentService(assignment_store).assign_teacher(
            AssignTeacherRequest(
                teacher_id=7,
                class_id=102,
                class_name="10A2",
                subject="Tin học",
                academic_year=2024,
                semester=Semester.SECOND,
            )
        )

        with pytest.raises(ScheduleRestrictionError):
            await score_service.create_score(make_input(semester=Semester.SECOND), 7)

    @pytest.mark.asyncio
    async def test_validation_runs_first(self, score_service) -> None:
        """Test invalid input is reported before authorization."""
        with pytest.raises(ValidationError) as exc_info:
            await score_service.create_score(
                make_input(teacher_id=9, component_scores=[8, 11], final_score=-1), 9
            )

        assert exc_info.value.errors == [
            "Final score must be between 0 and 10",
            "Regular score 2 must be between 0 and 10",
        ]

    @pytest.mark.asyncio
    async def test_duplicate_create(self, score_service) -> None:
        """Test a second create for the same tuple never overwrites."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(DuplicateError):
            await score_service.create_score(make_input(final_score=10), 7)

    @pytest.mark.asyncio
    async def test_concurrent_identical_creates(self, score_service, score_store) -> None:
        """Test exactly one of two concurrent identical creates wins."""
        results = await asyncio.gather(
            score_service.create_score(make_input(), 7),
            score_service.create_score(make_input(), 7),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        records = [r for r in results if not isinstance(r, Exception)]
        assert len(records) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], DuplicateError)
        assert await score_store.get_by_id(SCORE_ID) is not None


class TestUpdateScore:
    """Tests for update_score."""

    @pytest.mark.asyncio
    async def test_owner_update(self, score_service, now) -> None:
        """Test the owner can regrade and the average is recomputed."""
        await score_service.create_score(make_input(), 7)
        later = now + timedelta(hours=1)

        record = await score_service.update_score(
            SCORE_ID,
            ScoreValues(component_scores=[10], midterm_score=10, final_score=10, comment="Great"),
            7,
            now=later,
        )

        assert record.id == SCORE_ID
        assert record.average == 10.0
        assert record.comment == "Great"
        assert record.created_at == now
        assert record.updated_at == later

    @pytest.mark.asyncio
    async def test_identity_fields_ignored(self, score_service, score_store) -> None:
        """Test update never moves a record to another tuple."""
        await score_service.create_score(make_input(), 7)

        await score_service.update_score(
            SCORE_ID, make_input(class_name="11B1", subject="Toán", final_score=9), 7
        )

        stored = await score_store.get_by_id(SCORE_ID)
        assert stored.class_name == "10A2"
        assert stored.subject == "Tin học"
        assert stored.final_score == 9

    @pytest.mark.asyncio
    async def test_foreign_owner(self, score_service) -> None:
        """Test another teacher cannot update the record."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(AuthorizationError):
            await score_service.update_score(SCORE_ID, ScoreValues(final_score=10), 8)

    @pytest.mark.asyncio
    async def test_missing_record(self, score_service) -> None:
        """Test updating an unknown id fails."""
        with pytest.raises(NotFoundError):
            await score_service.update_score("missing", ScoreValues(), 7)

    @pytest.mark.asyncio
    async def test_out_of_range(self, score_service) -> None:
        """Test update rejects out-of-range scores."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(ValidationError):
            await score_service.update_score(SCORE_ID, ScoreValues(midterm_score=12), 7)

    @pytest.mark.asyncio
    async def test_missing_record_reported_before_ranges(self, score_service) -> None:
        """Test an unknown id wins over out-of-range scores."""
        with pytest.raises(NotFoundError):
            await score_service.update_score("missing", ScoreValues(midterm_score=11), 7)

    @pytest.mark.asyncio
    async def test_ownership_reported_before_ranges(self, score_service, score_store) -> None:
        """Test a foreign owner wins over out-of-range scores."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(AuthorizationError):
            await score_service.update_score(SCORE_ID, ScoreValues(midterm_score=11), 3)

        assert (await score_store.get_by_id(SCORE_ID)).midterm_score == 7

    @pytest.mark.asyncio
    async def test_closed_window_reported_before_ranges(self, score_service, now) -> None:
        """Test the schedule gate wins over out-of-range scores."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(ScheduleRestrictionError):
            await score_service.update_score(
                SCORE_ID, ScoreValues(midterm_score=11), 7, now=now + timedelta(days=1)
            )

    @pytest.mark.asyncio
    async def test_window_closed(self, score_service, now) -> None:
        """Test the stored tuple's window must still be open."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(ScheduleRestrictionError):
            await score_service.update_score(
                SCORE_ID, ScoreValues(final_score=10), 7, now=now + timedelta(days=1)
            )

    @pytest.mark.asyncio
    async def test_revoked_grant_ownership_only(self, score_service, assignment_store) -> None:
        """Test ownership alone suffices when re-verification is off."""
        await score_service.create_score(make_input(), 7)
        await AssignmentService(assignment_store).end_assignment(1)

        record = await score_service.update_score(SCORE_ID, ScoreValues(final_score=10), 7)

        assert record.final_score == 10

    @pytest.mark.asyncio
    async def test_revoked_grant_with_reverification(
        self, resolver, gate, score_store, assignment_store, clock
    ) -> None:
        """Test a revoked grant blocks update when re-verification is on."""
        service = ScoreMutationService(
            resolver,
            gate,
            score_store,
            settings=ScoreSettings(reverify_assignment_on_mutation=True),
            clock=clock,
        )
        await service.create_score(make_input(), 7)
        await AssignmentService(assignment_store).end_assignment(1)

        with pytest.raises(AuthorizationError):
            await service.update_score(SCORE_ID, ScoreValues(final_score=10), 7)
        with pytest.raises(AuthorizationError):
            await service.delete_score(SCORE_ID, 7)


class TestDeleteAndRead:
    """Tests for delete_score and get_score."""

    @pytest.mark.asyncio
    async def test_owner_delete(self, score_service, score_store) -> None:
        """Test the owner can delete while the window is open."""
        await score_service.create_score(make_input(), 7)

        await score_service.delete_score(SCORE_ID, 7)

        assert await score_store.get_by_id(SCORE_ID) is None

    @pytest.mark.asyncio
    async def test_foreign_delete(self, score_service, score_store) -> None:
        """Test another teacher cannot delete the record."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(AuthorizationError):
            await score_service.delete_score(SCORE_ID, 8)
        assert await score_store.get_by_id(SCORE_ID) is not None

    @pytest.mark.asyncio
    async def test_delete_after_window(self, score_service, now) -> None:
        """Test delete is gated by the schedule."""
        await score_service.create_score(make_input(), 7)

        with pytest.raises(ScheduleRestrictionError):
            await score_service.delete_score(SCORE_ID, 7, now=now + timedelta(days=1))

    @pytest.mark.asyncio
    async def test_get_score(self, score_service) -> None:
        """Test reads are restricted to the owner."""
        created = await score_service.create_score(make_input(), 7)

        assert await score_service.get_score(SCORE_ID, 7) == created
        with pytest.raises(AuthorizationError):
            await score_service.get_score(SCORE_ID, 8)
        with pytest.raises(NotFoundError):
            await score_service.get_score("missing", 7)


class TestBatches:
    """Tests for batch variants."""

    @pytest.mark.asyncio
    async def test_create_partial_success(self, score_service) -> None:
        """Test failed elements never abort the rest of the batch."""
        result = await score_service.create_scores(
            [
                make_input(),
                make_input(student_id=43, midterm_score=11),
                make_input(),
                make_input(student_id=44, subject="Toán"),
                make_input(student_id=45),
            ],
            7,
        )

        assert [r.student_id for r in result.succeeded] == [42, 45]
        assert [(f.index, f.error_kind) for f in result.failed] == [
            (1, "validation"),
            (2, "duplicate"),
            (3, "authorization"),
        ]
        assert result.failed[1].score_id == SCORE_ID
        assert result.success_count == 2
        assert result.failure_count == 3

    @pytest.mark.asyncio
    async def test_create_failure_without_identity(self, score_service) -> None:
        """Test an element missing identity fields has no score id."""
        result = await score_service.create_scores([ScoreInput()], 7)

        assert result.failed[0].score_id is None
        assert result.failed[0].error_kind == "validation"

    @pytest.mark.asyncio
    async def test_update_batch(self, score_service) -> None:
        """Test batch update reports missing and foreign records."""
        await score_service.create_score(make_input(), 7)

        result = await score_service.update_scores(
            [
                ScoreUpdateItem(score_id=SCORE_ID, final_score=10),
                ScoreUpdateItem(score_id="missing"),
            ],
            7,
        )

        assert result.succeeded[0].final_score == 10
        assert result.failed[0].score_id == "missing"
        assert result.failed[0].error_kind == "not_found"

    @pytest.mark.asyncio
    async def test_delete_batch(self, score_service) -> None:
        """Test batch delete partitions deleted ids and failures."""
        await score_service.create_score(make_input(), 7)
        await score_service.create_score(make_input(student_id=43), 7)

        result = await score_service.delete_scores(
            [SCORE_ID, "missing", "7_43_10a2_tinhoc_2024_1"], 7
        )

        assert result.deleted_ids == [SCORE_ID, "7_43_10a2_tinhoc_2024_1"]
        assert [(f.index, f.error_kind) for f in result.failed] == [(1, "not_found")]


class TestClassSummary:
    """Tests for get_class_summary."""

    @pytest.mark.asyncio
    async def test_summary(self, score_service) -> None:
        """Test count, mean of averages and top scores."""
        await score_service.create_score(make_input(), 7)
        await score_service.create_score(
            make_input(student_id=43, component_scores=[10], midterm_score=10, final_score=10), 7
        )
        await score_service.create_score(
            make_input(student_id=44, component_scores=[], midterm_score=0, final_score=0), 7
        )

        summary = await score_service.get_class_summary(
            7, "10A2", "Tin học", 2024, Semester.FIRST
        )

        assert summary.student_count == 3
        # (7.8 + 10.0 + 0.0) / 3 = 5.9333 -> 5.9
        assert summary.average == 5.9
        assert [r.student_id for r in summary.top_scores] == [43, 42, 44]

    @pytest.mark.asyncio
    async def test_summary_empty(self, score_service) -> None:
        """Test an empty sheet summarizes to zero."""
        summary = await score_service.get_class_summary(
            7, "10A2", "Tin học", 2024, Semester.FIRST
        )

        assert summary.student_count == 0
        assert summary.average == 0.0
        assert summary.top_scores == []

    @pytest.mark.asyncio
    async def test_summary_requires_subject_grant(self, score_service) -> None:
        """Test the summary is restricted to the subject's teachers."""
        with pytest.raises(AuthorizationError):
            await score_service.get_class_summary(9, "10A2", "Tin học", 2024, Semester.FIRST)
