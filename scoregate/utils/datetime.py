# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for Score Gate.

Schedule windows are compared against "now" on every gate evaluation, so
every datetime that reaches the gate must be timezone-aware UTC. Naive
values coming from callers or from the database are normalized here.

Usage:
------
    from scoregate.utils.datetime import utc_now, ensure_utc

    now = utc_now()
    start = ensure_utc(request.start_time)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def end_of_day(dt: datetime) -> datetime:
    """Get the last instant of the UTC day containing ``dt``.

    Args:
        dt: Reference datetime.

    Returns:
        Timezone-aware datetime at 23:59:59.999999 UTC of the same day.
    """
    return ensure_utc(dt).replace(hour=23, minute=59, second=59, microsecond=999999)


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 string or None.
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()
