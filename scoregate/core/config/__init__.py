# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for Score Gate.

Example:
    >>> from scoregate.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from scoregate.core.config.settings import (
    DatabaseSettings,
    ScheduleSettings,
    ScoreSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "DatabaseSettings",
    "ScheduleSettings",
    "ScoreSettings",
]
