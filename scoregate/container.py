# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Component wiring for Score Gate.

Builds the rule engine from stores and settings and owns the lifecycle of
the lock sweep (and, for the SQL variant, of the connection pool).

Example:
    container = await build_sql_container(get_settings())
    await container.start()
    try:
        record = await container.scores.create_score(data, teacher_id)
    finally:
        await container.stop()
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from scoregate.core.config.settings import Settings, get_settings
from scoregate.domains.assignment.index import AssignmentIndex
from scoregate.domains.assignment.resolver import AuthorizationResolver
from scoregate.domains.assignment.service import AssignmentService
from scoregate.domains.schedule.gate import ScheduleGate
from scoregate.domains.schedule.registry import ScheduleRegistry
from scoregate.domains.score.service import ScoreMutationService
from scoregate.infrastructure.background.scheduler import SweepScheduler
from scoregate.infrastructure.database.connection import (
    close_database,
    create_schema,
    init_database,
)
from scoregate.infrastructure.database.stores import (
    SqlAssignmentStore,
    SqlRosterLookup,
    SqlScheduleStore,
    SqlScoreStore,
)
from scoregate.infrastructure.stores.base import (
    AssignmentStore,
    RosterLookup,
    ScheduleStore,
    ScoreStore,
)
from scoregate.infrastructure.stores.memory import (
    InMemoryAssignmentStore,
    InMemoryRosterLookup,
    InMemoryScheduleStore,
    InMemoryScoreStore,
)
from scoregate.utils.datetime import utc_now
from scoregate.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class Container:
    """Wired Score Gate components.

    Attributes:
        settings: Application settings.
        resolver: Authorization resolver.
        gate: Schedule gate.
        assignments: Assignment administration.
        scores: Score mutation orchestrator.
        scheduler: Lock sweep scheduler.
        owns_database: Whether stop() closes the connection pool.
    """

    settings: Settings
    assignment_store: AssignmentStore
    score_store: ScoreStore
    schedule_store: ScheduleStore
    roster: RosterLookup
    resolver: AuthorizationResolver
    gate: ScheduleGate
    assignments: AssignmentService
    scores: ScoreMutationService
    scheduler: SweepScheduler
    owns_database: bool = False

    async def start(self) -> None:
        """Start background jobs."""
        await self.scheduler.start()
        logger.info("Score Gate started", environment=self.settings.environment)

    async def stop(self) -> None:
        """Stop background jobs and release resources."""
        await self.scheduler.stop()
        if self.owns_database:
            await close_database()
        logger.info("Score Gate stopped")


def build_container(
    settings: Settings,
    assignment_store: AssignmentStore,
    score_store: ScoreStore,
    schedule_store: ScheduleStore,
    roster: RosterLookup,
    clock: Callable[[], datetime] = utc_now,
) -> Container:
    """Wire components on top of the given stores.

    Args:
        settings: Application settings.
        assignment_store: Teacher grants.
        score_store: Score records.
        schedule_store: Schedule windows.
        roster: Student enrollment lookup.
        clock: Source of "now" shared by every component.

    Returns:
        The wired container, not yet started.
    """
    resolver = AuthorizationResolver(AssignmentIndex(assignment_store), score_store, roster)
    gate = ScheduleGate(ScheduleRegistry(schedule_store), clock=clock)

    return Container(
        settings=settings,
        assignment_store=assignment_store,
        score_store=score_store,
        schedule_store=schedule_store,
        roster=roster,
        resolver=resolver,
        gate=gate,
        assignments=AssignmentService(assignment_store),
        scores=ScoreMutationService(
            resolver, gate, score_store, settings=settings.scores, clock=clock
        ),
        scheduler=SweepScheduler(gate, settings.schedule, clock=clock),
    )


def build_in_memory_container(
    settings: Settings | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> Container:
    """Wire components on in-memory stores for tests and local runs."""
    return build_container(
        settings or get_settings(),
        InMemoryAssignmentStore(),
        InMemoryScoreStore(),
        InMemoryScheduleStore(),
        InMemoryRosterLookup(),
        clock=clock,
    )


async def build_sql_container(settings: Settings | None = None) -> Container:
    """Configure logging, open the connection pool and wire SQL stores.

    Raises:
        DatabaseError: If the connection pool cannot be created.
    """
    settings = settings or get_settings()
    setup_logging(settings)
    await init_database(settings)
    if settings.database.create_schema:
        await create_schema()

    container = build_container(
        settings,
        SqlAssignmentStore(),
        SqlScoreStore(),
        SqlScheduleStore(),
        SqlRosterLookup(),
    )
    container.owns_database = True
    return container
