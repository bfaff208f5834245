# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule gate for time-boxed score entry.

A window moves through these states:

- PENDING: now is before start_time
- OPEN: start_time <= now <= end_time, active and not locked
- LOCKED: locked by the sweep or an administrator, terminal
- INACTIVE: deactivated, ignored by every query

PENDING becomes OPEN with time alone. OPEN or PENDING becomes LOCKED
through ``sweep_and_lock`` or ``lock_window``. A window whose end time has
passed but which the sweep has not reached yet already evaluates as
LOCKED, so entry closes at end_time regardless of sweep latency.

Every decision is re-evaluated against the clock on each call; nothing is
cached.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from scoregate.domains.exceptions import OverlapError, ValidationError
from scoregate.domains.schedule.registry import ScheduleRegistry
from scoregate.models.common import Semester, WindowState
from scoregate.models.schedule import (
    EntryPermission,
    ScheduleWindow,
    ScheduleWindowCreate,
    ScheduleWindowUpdate,
)
from scoregate.utils.datetime import end_of_day, ensure_utc, format_iso, utc_now

logger = logging.getLogger(__name__)


class ScheduleGate:
    """Decides whether score entry is open for a class, year and semester.

    Attributes:
        registry: Schedule window registry.
    """

    def __init__(
        self,
        registry: ScheduleRegistry,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the gate.

        Args:
            registry: Schedule window registry.
            clock: Source of "now" when a call does not pass one.
        """
        self.registry = registry
        self._clock = clock

    def _now(self, now: datetime | None) -> datetime:
        return ensure_utc(now if now is not None else self._clock())

    @staticmethod
    def window_state(window: ScheduleWindow, now: datetime) -> WindowState:
        """Evaluate the state of a window at a point in time.

        Args:
            window: Window to evaluate.
            now: Evaluation time.

        Returns:
            The window state.
        """
        now = ensure_utc(now)
        if not window.is_active:
            return WindowState.INACTIVE
        if window.is_locked:
            return WindowState.LOCKED
        if now < window.start_time:
            return WindowState.PENDING
        if now > window.end_time:
            return WindowState.LOCKED
        return WindowState.OPEN

    async def find_active_window(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        now: datetime | None = None,
    ) -> ScheduleWindow | None:
        """Find the active window relevant at ``now``."""
        return await self.registry.find_active_window(
            class_name, academic_year, semester, self._now(now)
        )

    async def is_entry_allowed(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        now: datetime | None = None,
    ) -> bool:
        """Check if scores may be written for the tuple right now.

        Args:
            class_name: Class name.
            academic_year: Academic year.
            semester: Concrete semester. BOTH never has a window.
            now: Evaluation time, defaults to the gate clock.

        Returns:
            True only if an active, unlocked window contains ``now``.
        """
        permission = await self.check_permission(class_name, academic_year, semester, now)
        return permission.is_allowed

    async def check_permission(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        now: datetime | None = None,
    ) -> EntryPermission:
        """Evaluate entry permission with the window that decided it."""
        now = self._now(now)
        window = None
        state = None
        if semester.is_concrete:
            window = await self.registry.find_active_window(
                class_name, academic_year, semester, now
            )
            if window is not None:
                state = self.window_state(window, now)

        return EntryPermission(
            is_allowed=state is WindowState.OPEN,
            class_name=class_name,
            academic_year=academic_year,
            semester=semester,
            evaluated_at=now,
            state=state,
            window=window,
        )

    async def create_window(
        self,
        request: ScheduleWindowCreate,
        now: datetime | None = None,
    ) -> ScheduleWindow:
        """Open a new score entry window.

        Args:
            request: Window creation data.
            now: Creation timestamp, defaults to the gate clock.

        Returns:
            The stored window.

        Raises:
            ValidationError: If the request is malformed or start >= end.
            OverlapError: If an active window of the tuple intersects it.
        """
        start_time = ensure_utc(request.start_time)
        end_time = ensure_utc(request.end_time)

        errors = []
        if not request.name.strip():
            errors.append("Window name is required")
        if not request.class_name.strip():
            errors.append("Class name is required")
        if not request.semester.is_concrete:
            errors.append("Semester must be 1 or 2")
        if start_time >= end_time:
            errors.append("Start time must be before end time")
        if errors:
            raise ValidationError("Invalid schedule window", errors)

        await self._check_overlap(
            request.class_name,
            request.academic_year,
            request.semester,
            start_time,
            end_time,
        )

        created_at = self._now(now)
        window = await self.registry.add(
            ScheduleWindow(
                name=request.name,
                class_name=request.class_name,
                academic_year=request.academic_year,
                semester=request.semester,
                start_time=start_time,
                end_time=end_time,
                created_by=request.created_by,
                description=request.description,
                created_at=created_at,
                updated_at=created_at,
            )
        )

        logger.info(
            "Created schedule window: id=%s, class=%s, year=%s, semester=%s, %s..%s",
            window.id,
            window.class_name,
            window.academic_year,
            window.semester.value,
            format_iso(window.start_time),
            format_iso(window.end_time),
        )

        return window

    async def create_window_for_today(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        created_by: str | None = None,
        name: str | None = None,
        now: datetime | None = None,
    ) -> ScheduleWindow:
        """Open a window from now until the end of the same UTC day.

        The start is truncated to the second so a call in the last second of
        the day still yields a non-empty window.
        """
        now = self._now(now)
        start = now.replace(microsecond=0)
        request = ScheduleWindowCreate(
            name=name or f"Score entry {class_name} {now.date().isoformat()}",
            class_name=class_name,
            academic_year=academic_year,
            semester=semester,
            start_time=start,
            end_time=end_of_day(now),
            created_by=created_by,
        )
        return await self.create_window(request, now=now)

    async def update_window(
        self,
        window_id: int,
        changes: ScheduleWindowUpdate,
        now: datetime | None = None,
    ) -> ScheduleWindow:
        """Apply a partial update to a window.

        The lock flag is never cleared. Duration and overlap are checked
        again against the resulting window.

        Raises:
            NotFoundError: If the window does not exist.
            ValidationError: If the resulting start >= end.
            OverlapError: If the resulting range collides with another window.
        """
        window = await self.registry.require(window_id)

        if changes.name is not None:
            window.name = changes.name
        if changes.start_time is not None:
            window.start_time = ensure_utc(changes.start_time)
        if changes.end_time is not None:
            window.end_time = ensure_utc(changes.end_time)
        if changes.is_active is not None:
            window.is_active = changes.is_active
        if changes.description is not None:
            window.description = changes.description

        if window.start_time >= window.end_time:
            raise ValidationError(
                "Start time must be before end time",
                details={"window_id": window_id},
            )

        if window.is_active:
            await self._check_overlap(
                window.class_name,
                window.academic_year,
                window.semester,
                window.start_time,
                window.end_time,
                exclude_id=window_id,
            )

        window.updated_at = self._now(now)
        await self.registry.save(window)

        logger.info("Updated schedule window: id=%s", window_id)
        return await self.registry.require(window_id)

    async def delete_window(self, window_id: int) -> None:
        """Delete a window. Scores written through it are left untouched.

        Raises:
            NotFoundError: If the window does not exist.
        """
        await self.registry.require(window_id)
        await self.registry.delete(window_id)
        logger.info("Deleted schedule window: id=%s", window_id)

    async def lock_window(self, window_id: int, locked_by: str | None = None) -> ScheduleWindow:
        """Lock a window by hand. Locking a locked window is a no-op.

        Raises:
            NotFoundError: If the window does not exist.
        """
        await self.registry.require(window_id)
        if await self.registry.lock(window_id):
            logger.info("Locked schedule window: id=%s, by=%s", window_id, locked_by)
        return await self.registry.require(window_id)

    async def list_windows(self, academic_year: int, semester: Semester) -> list[ScheduleWindow]:
        """All windows of a year and semester ordered by class name."""
        return await self.registry.for_year_semester(academic_year, semester)

    async def sweep_and_lock(self, now: datetime | None = None) -> int:
        """Lock every active, unlocked window whose end time has passed.

        Idempotent. Never raises: a failure on one window is logged and the
        sweep moves on to the next one.

        Args:
            now: Sweep time, defaults to the gate clock.

        Returns:
            Number of windows locked by this call.
        """
        now = self._now(now)
        try:
            candidates = await self.registry.lockable(now)
        except Exception:
            logger.exception("Schedule sweep could not list expired windows")
            return 0

        locked = 0
        for window in candidates:
            try:
                if await self.registry.lock(window.id):
                    locked += 1
                    logger.info(
                        "Auto-locked schedule window: id=%s, class=%s, ended=%s",
                        window.id,
                        window.class_name,
                        format_iso(window.end_time),
                    )
            except Exception:
                logger.exception("Failed to lock schedule window %s", window.id)

        if locked:
            logger.info("Schedule sweep locked %d window(s)", locked)
        return locked

    async def _check_overlap(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        start_time: datetime,
        end_time: datetime,
        exclude_id: int | None = None,
    ) -> None:
        overlapping = await self.registry.find_overlapping(
            class_name, academic_year, semester, start_time, end_time, exclude_id
        )
        if overlapping:
            raise OverlapError(
                "Schedule window overlaps with an existing window",
                {
                    "class_name": class_name,
                    "academic_year": academic_year,
                    "semester": semester.value,
                    "conflicting_ids": [w.id for w in overlapping],
                },
            )
