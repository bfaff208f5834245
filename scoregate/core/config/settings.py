# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score Gate configuration.

Every value can be set from the environment (``DB_*``, ``SCHEDULE_*``,
``SCORE_*`` and the top-level ``ENVIRONMENT``/``DEBUG``/``LOG_LEVEL``) or
a ``.env`` file. ``get_settings()`` returns one cached instance.

Example:
    >>> from scoregate.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.schedule.sweep_interval_seconds
    60
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PASSWORD = "scoregate_password"


class DatabaseSettings(BaseSettings):
    """Database configuration for the score, assignment and schedule tables.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        create_schema: Create missing tables when the SQL container starts.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "scoregate"
    password: SecretStr = SecretStr(DEFAULT_DB_PASSWORD)
    host: str = "localhost"
    port: int = 5432
    database: str = "scoregate"
    pool_size: int = 10
    max_overflow: int = 20
    create_schema: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for schema tooling."""
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class ScheduleSettings(BaseSettings):
    """Schedule window sweep configuration.

    Attributes:
        sweep_enabled: Whether the periodic lock sweep runs at all.
        sweep_interval_seconds: Seconds between two sweeps.
        sweep_on_startup: Run one sweep as soon as the scheduler starts.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULE_",
        extra="ignore",
    )

    sweep_enabled: bool = True
    sweep_interval_seconds: int = Field(default=60, gt=0)
    sweep_on_startup: bool = True


class ScoreSettings(BaseSettings):
    """Score mutation policy configuration.

    Attributes:
        reverify_assignment_on_mutation: Re-check class and subject grants on
            update and delete in addition to ownership. Off by default:
            ownership alone is required.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORE_",
        extra="ignore",
    )

    reverify_assignment_on_mutation: bool = False


class Settings(BaseSettings):
    """Top-level settings holding the database, sweep and score policy groups.

    Build directly in tests; use get_settings() everywhere else.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        schedule: Schedule sweep settings.
        scores: Score mutation policy settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    scores: ScoreSettings = Field(default_factory=ScoreSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Refuse to run production on the shipped database password.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.database.password.get_secret_value() == DEFAULT_DB_PASSWORD:
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DB_PASSWORD environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment once.

    clear_settings_cache() forces the next call to read it again.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Drop the cached settings.

    Tests call this after patching the environment.
    """
    get_settings.cache_clear()
