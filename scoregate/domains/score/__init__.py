# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score domain package.

This package provides:
- Identity: composite record id derivation
- Derivation: score validation and weighted average
- ScoreMutationService: gated create, update and delete
"""

from scoregate.domains.score.derivation import (
    compute_average,
    validate_score_input,
    validate_scores,
)
from scoregate.domains.score.identity import FOLDING_TABLE, compute_id, normalize_token
from scoregate.domains.score.service import ScoreMutationService

__all__ = [
    "FOLDING_TABLE",
    "normalize_token",
    "compute_id",
    "validate_scores",
    "validate_score_input",
    "compute_average",
    "ScoreMutationService",
]
