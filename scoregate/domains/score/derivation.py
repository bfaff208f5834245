# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score validation and weighted average derivation.

The average weighs the mean of the component scores once, the midterm
twice and the final three times:

    average = (mean(components) + 2 * midterm + 3 * final) / 6

rounded half-up to one decimal. Arithmetic is exact (Fraction) so values
such as 7.75 round to 7.8 rather than falling victim to binary floats.
"""

import math
from fractions import Fraction
from typing import Sequence

from scoregate.domains.exceptions import ValidationError
from scoregate.models.score import ScoreInput

SCORE_MIN = 0
SCORE_MAX = 10


def _in_range(value: int) -> bool:
    return SCORE_MIN <= value <= SCORE_MAX


def score_range_errors(
    component_scores: Sequence[int],
    midterm_score: int,
    final_score: int,
) -> list[str]:
    """List every out-of-range score. Values are never clamped."""
    errors = []
    if not _in_range(midterm_score):
        errors.append(f"Mid-term score must be between {SCORE_MIN} and {SCORE_MAX}")
    if not _in_range(final_score):
        errors.append(f"Final score must be between {SCORE_MIN} and {SCORE_MAX}")
    for position, score in enumerate(component_scores, start=1):
        if not _in_range(score):
            errors.append(
                f"Regular score {position} must be between {SCORE_MIN} and {SCORE_MAX}"
            )
    return errors


def validate_scores(
    component_scores: Sequence[int],
    midterm_score: int,
    final_score: int,
) -> None:
    """Check that every score lies in [0, 10].

    Raises:
        ValidationError: Listing every out-of-range value.
    """
    errors = score_range_errors(component_scores, midterm_score, final_score)
    if errors:
        raise ValidationError("Score values out of range", errors)


def validate_score_input(data: ScoreInput) -> list[str]:
    """Collect required-field and range errors of a create request.

    Args:
        data: Score submission.

    Returns:
        Every violation found, empty when the input is valid.
    """
    errors = []
    if data.student_id is None:
        errors.append("Student ID is required")
    if not data.class_name or not data.class_name.strip():
        errors.append("Class name is required")
    if not data.subject or not data.subject.strip():
        errors.append("Subject is required")
    if data.semester is None:
        errors.append("Semester is required")
    elif not data.semester.is_concrete:
        errors.append("Semester must be '1' or '2'")
    if data.academic_year is None or data.academic_year <= 0:
        errors.append("Valid year is required")

    errors.extend(
        score_range_errors(data.component_scores, data.midterm_score, data.final_score)
    )
    return errors


def round_half_up(value: Fraction, places: int = 1) -> float:
    """Round an exact value half-up to ``places`` decimals."""
    scale = 10**places
    return math.floor(value * scale + Fraction(1, 2)) / scale


def compute_average(
    component_scores: Sequence[int],
    midterm_score: int,
    final_score: int,
) -> float:
    """Compute the weighted average of a score record.

    Args:
        component_scores: Continuous assessment scores.
        midterm_score: Midterm exam score.
        final_score: Final exam score.

    Returns:
        Average in [0, 10] with one decimal. 0.0 when nothing was graded.

    Raises:
        ValidationError: If any score lies outside [0, 10].
    """
    validate_scores(component_scores, midterm_score, final_score)
    if not component_scores and midterm_score == 0 and final_score == 0:
        return 0.0

    mean = (
        Fraction(sum(component_scores), len(component_scores))
        if component_scores
        else Fraction(0)
    )
    return round_half_up((mean + 2 * midterm_score + 3 * final_score) / 6)
