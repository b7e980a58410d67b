"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.

The only value without a default is DATABASE_URL: the service refuses to
start without a store to talk to.

Usage:
    from restaurant_pos.core.config import get_settings

    settings = get_settings()
    print(settings.database_url)
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local work, usually against SQLite
        STAGING: Pre-production deployment
        PRODUCTION: Live restaurant floor
    """
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.

    Attributes:
        env_mode: Current environment (development/staging/production)
        debug: Verbose logging and raw error text in 500 responses

        # Database
        database_url: SQLAlchemy async connection string (required)
        database_echo: Log every SQL statement
        database_pool_size: Connection pool size (ignored for SQLite)
        database_max_overflow: Extra connections when the pool is full

        # Order workflow
        enforce_status_transitions: Reject status writes that skip or
            reverse the kitchen workflow
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Restaurant POS",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    database_url: str = Field(
        ...,
        description="Async SQLAlchemy URL, e.g. postgresql+psycopg://user:pw@host/db"
    )
    database_echo: bool = Field(
        default=False,
        description="Log all SQL statements"
    )
    database_pool_size: int = Field(
        default=5,
        ge=1,
        description="Connection pool size"
    )
    database_max_overflow: int = Field(
        default=10,
        ge=0,
        description="Extra connections when pool is full"
    )

    # ==========================================================================
    # ORDER WORKFLOW
    # ==========================================================================

    enforce_status_transitions: bool = Field(
        default=False,
        description="Only allow the kitchen workflow's legal status transitions"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("DATABASE_URL must not be empty")
        return v.strip()

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_sqlite(self) -> bool:
        """SQLite URLs get no pool sizing and are only meant for dev/tests."""
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Raises:
        pydantic.ValidationError: If DATABASE_URL is not configured

    Example:
        >>> settings = get_settings()
        >>> print(settings.env_mode)
        EnvironmentMode.DEVELOPMENT
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(settings: Settings, level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        settings: Active settings; ``debug`` forces DEBUG level
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("restaurant_pos")
