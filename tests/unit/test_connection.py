# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database connection management."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from scoregate.core.config.settings import Settings
from scoregate.domains.exceptions import NotFoundError
from scoregate.infrastructure.database import connection
from scoregate.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_schema,
    get_engine,
    get_session,
    init_database,
)
from scoregate.infrastructure.database.tables import Base


@pytest.fixture(autouse=True)
def reset_pool():
    """Start and end every test without a connection pool."""
    connection._engine = None
    connection._sessionmaker = None
    yield
    connection._engine = None
    connection._sessionmaker = None


@pytest.fixture
def mock_session():
    """Session usable as an async context manager."""
    session = AsyncMock()
    session.__aenter__.return_value = session
    session.__aexit__.return_value = None
    return session


class TestUninitialized:
    """Tests before init_database runs."""

    def test_get_engine_raises(self) -> None:
        """Test accessing the engine before init fails."""
        with pytest.raises(DatabaseError) as exc_info:
            get_engine()

        assert "not initialized" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_get_session_raises(self) -> None:
        """Test opening a session before init fails."""
        with pytest.raises(DatabaseError):
            async with get_session():
                pass

    @pytest.mark.asyncio
    async def test_connection_check_is_false(self) -> None:
        """Test the health check reports an uninitialized pool."""
        assert await check_database_connection() is False


class TestInitAndClose:
    """Tests for pool lifecycle."""

    @pytest.mark.asyncio
    async def test_init_uses_database_settings(self) -> None:
        """Test the engine is created from the database settings."""
        settings = Settings(debug=False)
        engine = MagicMock()
        engine.dispose = AsyncMock()

        with patch.object(connection, "create_async_engine", return_value=engine) as mock_create:
            await init_database(settings)

        assert get_engine() is engine
        kwargs = mock_create.call_args.kwargs
        assert mock_create.call_args.args[0] == settings.database.url
        assert kwargs["pool_size"] == settings.database.pool_size
        assert kwargs["echo"] is False

        await close_database()

        engine.dispose.assert_awaited_once()
        with pytest.raises(DatabaseError):
            get_engine()


class TestGetSession:
    """Tests for session scoping."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, mock_session) -> None:
        """Test the session is committed when the block succeeds."""
        connection._sessionmaker = MagicMock(return_value=mock_session)

        async with get_session() as session:
            assert session is mock_session

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_wraps_sqlalchemy_errors(self, mock_session) -> None:
        """Test driver errors roll back and surface as DatabaseError."""
        connection._sessionmaker = MagicMock(return_value=mock_session)

        with pytest.raises(DatabaseError) as exc_info:
            async with get_session():
                raise OperationalError("SELECT 1", {}, Exception("connection lost"))

        assert isinstance(exc_info.value.original_error, OperationalError)
        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_domain_errors_propagate_unchanged(self, mock_session) -> None:
        """Test domain errors roll back without being wrapped."""
        connection._sessionmaker = MagicMock(return_value=mock_session)

        with pytest.raises(NotFoundError):
            async with get_session():
                raise NotFoundError("Score x not found")

        mock_session.rollback.assert_awaited_once()


class TestCreateSchema:
    """Tests for create_schema."""

    @pytest.mark.asyncio
    async def test_requires_initialized_engine(self) -> None:
        """Test DDL cannot run before init."""
        with pytest.raises(DatabaseError):
            await create_schema()

    @pytest.mark.asyncio
    async def test_runs_create_all(self) -> None:
        """Test all tables are created inside one transaction."""
        conn = AsyncMock()
        begin = AsyncMock()
        begin.__aenter__.return_value = conn
        begin.__aexit__.return_value = None
        engine = MagicMock()
        engine.begin.return_value = begin
        connection._engine = engine

        await create_schema()

        conn.run_sync.assert_awaited_once_with(Base.metadata.create_all)
