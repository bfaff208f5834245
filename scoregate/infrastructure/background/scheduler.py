# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Periodic lock sweep for schedule windows.

Uses APScheduler to call ``ScheduleGate.sweep_and_lock`` on a fixed
interval (60 seconds by default) so that windows whose end time has passed
are persisted as locked.

Example:
    from scoregate.infrastructure.background.scheduler import SweepScheduler

    scheduler = SweepScheduler(gate, settings.schedule)
    await scheduler.start()
    ...
    await scheduler.stop()
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from scoregate.core.config.settings import ScheduleSettings
from scoregate.domains.schedule.gate import ScheduleGate
from scoregate.utils.datetime import format_iso, utc_now
from scoregate.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

SWEEP_JOB_ID = "schedule-window-sweep"


@dataclass
class SweepStats:
    """Counters of the sweep job.

    Attributes:
        run_count: Completed sweeps.
        error_count: Sweeps that raised unexpectedly.
        windows_locked: Windows locked across all sweeps.
        last_run: When the last sweep finished.
        last_locked: Windows locked by the last sweep.
    """

    run_count: int = 0
    error_count: int = 0
    windows_locked: int = 0
    last_run: datetime | None = None
    last_locked: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "run_count": self.run_count,
            "error_count": self.error_count,
            "windows_locked": self.windows_locked,
            "last_run": format_iso(self.last_run),
            "last_locked": self.last_locked,
        }


class SweepScheduler:
    """Interval scheduler driving the schedule window lock sweep.

    Attributes:
        gate: Schedule gate to sweep.
        settings: Sweep interval and startup behaviour.
        stats: Sweep counters.
    """

    def __init__(
        self,
        gate: ScheduleGate,
        settings: ScheduleSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the scheduler.

        Args:
            gate: Schedule gate to sweep.
            settings: Schedule settings.
            clock: Source of the sweep time.
        """
        self.gate = gate
        self.settings = settings
        self.stats = SweepStats()
        self._clock = clock
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._scheduler is not None

    async def tick(self) -> int:
        """Run one sweep.

        Never raises, so a failing sweep never kills the interval job.

        Returns:
            Number of windows locked.
        """
        now = self._clock()
        bind_context(job=SWEEP_JOB_ID)
        try:
            locked = await self.gate.sweep_and_lock(now)
        except Exception:
            self.stats.error_count += 1
            logger.exception("Schedule sweep failed")
            return 0
        finally:
            clear_context()

        self.stats.run_count += 1
        self.stats.windows_locked += locked
        self.stats.last_run = now
        self.stats.last_locked = locked

        if locked:
            logger.info("Schedule sweep finished", locked=locked)
        else:
            logger.debug("Schedule sweep finished", locked=0)
        return locked

    async def start(self) -> None:
        """Start the interval job. No-op when disabled or already running."""
        if self._scheduler is not None:
            return

        if not self.settings.sweep_enabled:
            logger.info("Schedule sweep disabled")
            return

        job_options: dict[str, Any] = {}
        if self.settings.sweep_on_startup:
            job_options["next_run_time"] = self._clock()

        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self.settings.sweep_interval_seconds),
            id=SWEEP_JOB_ID,
            name="Schedule window lock sweep",
            max_instances=1,
            coalesce=True,
            **job_options,
        )
        self._scheduler.start()

        logger.info(
            "Schedule sweep started",
            interval_seconds=self.settings.sweep_interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the interval job."""
        if self._scheduler is None:
            return

        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Schedule sweep stopped")

    def get_stats(self) -> dict[str, Any]:
        """Get scheduler statistics."""
        return {"is_running": self.is_running, **self.stats.to_dict()}
