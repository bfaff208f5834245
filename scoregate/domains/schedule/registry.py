# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule window registry over a ScheduleStore."""

from datetime import datetime

from scoregate.domains.exceptions import NotFoundError
from scoregate.infrastructure.stores.base import ScheduleStore
from scoregate.models.common import Semester
from scoregate.models.schedule import ScheduleWindow


class ScheduleRegistry:
    """Read/write access to score entry windows.

    Attributes:
        store: Backing schedule store.
    """

    def __init__(self, store: ScheduleStore) -> None:
        self.store = store

    async def require(self, window_id: int) -> ScheduleWindow:
        """Get a window or raise.

        Raises:
            NotFoundError: If the window does not exist.
        """
        window = await self.store.get(window_id)
        if window is None:
            raise NotFoundError(
                f"Schedule window {window_id} not found",
                {"window_id": window_id},
            )
        return window

    async def find_active_window(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        at: datetime,
    ) -> ScheduleWindow | None:
        return await self.store.find_active_window(class_name, academic_year, semester, at)

    async def find_overlapping(
        self,
        class_name: str,
        academic_year: int,
        semester: Semester,
        start_time: datetime,
        end_time: datetime,
        exclude_id: int | None = None,
    ) -> list[ScheduleWindow]:
        return await self.store.find_overlapping(
            class_name, academic_year, semester, start_time, end_time, exclude_id
        )

    async def lockable(self, before: datetime) -> list[ScheduleWindow]:
        """Active, unlocked windows that ended before ``before``."""
        return await self.store.list_lockable(before)

    async def for_year_semester(
        self,
        academic_year: int,
        semester: Semester,
    ) -> list[ScheduleWindow]:
        return await self.store.list_by_year_semester(academic_year, semester)

    async def add(self, window: ScheduleWindow) -> ScheduleWindow:
        return await self.store.add(window)

    async def save(self, window: ScheduleWindow) -> ScheduleWindow:
        return await self.store.save(window)

    async def lock(self, window_id: int) -> bool:
        return await self.store.lock(window_id)

    async def delete(self, window_id: int) -> None:
        await self.store.delete(window_id)
