# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule domain package.

This package provides:
- ScheduleRegistry: window storage access
- ScheduleGate: entry decisions, window administration and the lock sweep
"""

from scoregate.domains.schedule.gate import ScheduleGate
from scoregate.domains.schedule.registry import ScheduleRegistry

__all__ = [
    "ScheduleGate",
    "ScheduleRegistry",
]
