# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Connection pool for the SQL stores.

One async engine per process, created by ``init_database`` and released by
``close_database``. Stores open a short unit of work per call through
``get_session``.

Example:
    await init_database(settings)
    async with get_session() as session:
        result = await session.execute(select(ScoreRow))
    await close_database()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from scoregate.infrastructure.database.tables import Base

if TYPE_CHECKING:
    from scoregate.core.config.settings import Settings

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

NOT_INITIALIZED = "Database not initialized. Call init_database() first."


class DatabaseError(Exception):
    """Persistence failure below the domain layer.

    Attributes:
        message: Human-readable error description.
        original_error: The SQLAlchemy or driver error, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


async def init_database(settings: "Settings") -> None:
    """Create the engine and session factory.

    Args:
        settings: Application settings; ``settings.database`` holds the pool
            configuration and ``settings.debug`` turns on SQL echo.

    Raises:
        DatabaseError: If the engine cannot be created.
    """
    global _engine, _sessionmaker

    db = settings.database
    try:
        _engine = create_async_engine(
            db.url,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
            echo=settings.debug,
        )
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to initialize database connection", e) from e

    _sessionmaker = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def close_database() -> None:
    """Dispose of the engine. Safe to call when not initialized."""
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


def get_engine() -> AsyncEngine:
    """Get the engine.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _engine is None:
        raise DatabaseError(NOT_INITIALIZED)
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise DatabaseError(NOT_INITIALIZED)
    return _sessionmaker


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Open one unit of work.

    Commits when the block exits normally and rolls back otherwise.
    SQLAlchemy errors surface as DatabaseError; domain errors raised inside
    the block (DuplicateError, NotFoundError) propagate unchanged.

    Raises:
        DatabaseError: If not initialized or if the database fails.
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatabaseError("Database operation failed", e) from e
        except Exception:
            await session.rollback()
            raise


async def create_schema() -> None:
    """Create any missing Score Gate tables.

    For local runs and fresh databases; existing tables are left as they are.

    Raises:
        DatabaseError: If the database has not been initialized or DDL fails.
    """
    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create schema", e) from e


async def check_database_connection() -> bool:
    """Return True if the database answers a trivial query."""
    if _engine is None:
        return False

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
