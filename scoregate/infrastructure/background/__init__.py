# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Background jobs."""

from scoregate.infrastructure.background.scheduler import SweepScheduler, SweepStats

__all__ = ["SweepScheduler", "SweepStats"]
