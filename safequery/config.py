"""Configuration management for safequery."""

import os
import re
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .log import setup_logging, setup_production_logging
from .types import Environment

TABLE_PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9_]*$")
TRUE_VALUES = ["true", "1", "yes", "on"]


class Settings(BaseModel):
    """Application settings."""

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_bindings: bool = Field(
        default=True, description="Show bound values in DEBUG statement logs"
    )

    # Database
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy database URL; a SQLite file is used when unset",
    )
    database_path: str | None = Field(
        default=None, description="Override for the SQLite database file path"
    )
    echo_sql: bool = Field(
        default=False, description="Echo SQL emitted through SQLAlchemy engines"
    )

    # Query builder
    table_prefix: str = Field(
        default="", description="Prefix prepended to every table name"
    )
    strict_conditions: bool = Field(
        default=False,
        description=(
            "Raise instead of dropping non-equality WHERE clauses on update/delete"
        ),
    )

    @field_validator("table_prefix")
    @classmethod
    def validate_table_prefix(cls, value: str) -> str:
        """Only identifier characters may appear in the table prefix."""
        if not TABLE_PREFIX_PATTERN.fullmatch(value):
            raise ValueError(f"Invalid table prefix: {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Store the log level in upper case."""
        return value.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    kwargs: dict[str, Any] = {
        "environment": Environment(os.getenv("SAFEQUERY_ENV", "development")),
        "log_level": os.getenv("SAFEQUERY_LOG_LEVEL", "INFO"),
        "database_url": os.getenv("SAFEQUERY_DATABASE_URL") or None,
        "database_path": os.getenv("SAFEQUERY_DATABASE_PATH") or None,
        "echo_sql": os.getenv("SAFEQUERY_ECHO_SQL", "false").lower() in TRUE_VALUES,
        "table_prefix": os.getenv("SAFEQUERY_TABLE_PREFIX", ""),
        "log_bindings": (
            os.getenv("SAFEQUERY_LOG_BINDINGS", "true").lower() in TRUE_VALUES
        ),
    }

    strict = os.getenv("SAFEQUERY_STRICT_CONDITIONS")
    if strict is not None:
        kwargs["strict_conditions"] = strict.lower() in TRUE_VALUES

    return Settings(**kwargs)


def configure_logging(app_settings: Settings | None = None) -> None:
    """Set up logging at the configured level for the environment.

    Production also writes a rotating log file; other environments log to
    the console only.
    """
    app_settings = app_settings or settings
    if app_settings.is_production:
        setup_production_logging(level=app_settings.log_level)
    else:
        setup_logging(level=app_settings.log_level)


# Global settings instance
settings = load_settings()
