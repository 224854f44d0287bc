"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Every value can be overridden via environment variables or a .env file, so the
same build runs a fast local cafe (short brew times, debug logging) or a
production one.

Usage:
    from barista.core.config import get_settings

    settings = get_settings()
    seconds = settings.brew_seconds(DrinkKind.TEA)

Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from barista.models import DrinkKind


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing, verbose error details
        PRODUCTION: Live cafe
        STAGING: Pre-production run with production settings
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Listeners
        api_host / api_port: HTTP admin surface (health, dashboard)
        cafe_host / cafe_port: line-based TCP order counter

        # Kitchen
        prep_capacity: Maximum number of drinks being prepared at once
        max_items_per_order: Upper bound on the drinks in one order command
        tea_brew_seconds / coffee_brew_seconds: Preparation time per kind
        shutdown_grace_seconds: How long shutdown waits for cancelled brews
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
        default="Barista Order Service",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="HTTP admin server host"
    )
    api_port: int = Field(
        default=8001,
        description="HTTP admin server port"
    )

    # ==========================================================================
    # ORDER COUNTER (TCP)
    # ==========================================================================

    cafe_host: str = Field(
        default="0.0.0.0",
        description="Host the order counter listens on"
    )
    cafe_port: int = Field(
        default=8888,
        description="Port the order counter listens on (0 picks a free port)"
    )
    max_line_length: int = Field(
        default=1024,
        ge=16,
        description="Longest command line accepted from a client, in bytes"
    )

    # ==========================================================================
    # KITCHEN
    # ==========================================================================

    prep_capacity: int = Field(
        default=4,
        ge=1,
        description="Number of drinks that may be prepared concurrently"
    )
    max_items_per_order: int = Field(
        default=100,
        ge=1,
        description="Most drinks a single order command may ask for"
    )
    tea_brew_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Time needed to prepare one tea"
    )
    coffee_brew_seconds: float = Field(
        default=45.0,
        ge=0,
        description="Time needed to prepare one coffee"
    )
    shutdown_grace_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Seconds shutdown waits for cancelled preparations"
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

    @model_validator(mode="after")
    def validate_brew_times(self) -> "Settings":
        """Tea and coffee must not take the same time to prepare."""
        if self.tea_brew_seconds == self.coffee_brew_seconds:
            raise ValueError(
                "tea_brew_seconds and coffee_brew_seconds must differ "
                f"(both are {self.tea_brew_seconds})"
            )
        return self

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    def brew_seconds(self, kind: DrinkKind) -> float:
        """
        Preparation time for one drink of the given kind.

        Used as the scheduler's duration function; tea and coffee always
        take different, fixed amounts of time.
        """
        if kind == DrinkKind.TEA:
            return self.tea_brew_seconds
        return self.coffee_brew_seconds


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; call ``get_settings.cache_clear()``
    after changing the environment (tests do this).

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-30s │ %(message)s"
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
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return logging.getLogger("barista")
