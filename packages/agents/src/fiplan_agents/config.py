"""Configuration system for FIPlan Agents.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the background compute channel
and the planning engine it drives.

Usage:
    from fiplan_agents.config import FIPlanConfig

    # Load from environment variables and .env file
    config = FIPlanConfig()

    # Access channel settings
    print(config.channel.request_timeout_ms)

    # Planning assumptions are nested models; override with
    # FIPLAN_ASSUMPTIONS__INFLATION_RATE=6.0
    print(config.assumptions.inflation_rate)
"""

import logging
from typing import Any

import structlog
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fiplan_core.assumptions import OptimizerSettings, PlanningAssumptions
from fiplan_core.exceptions import ConfigurationError

DEFAULT_REQUEST_TIMEOUT_MS = 30_000


class ChannelConfig(BaseSettings):
    """Background compute channel settings.

    Environment Variables:
        FIPLAN_CHANNEL_REQUEST_TIMEOUT_MS: Per-request timeout in milliseconds
        FIPLAN_CHANNEL_WORKER_THREAD_NAME: Name of the worker thread
    """

    model_config = SettingsConfigDict(
        env_prefix="FIPLAN_CHANNEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    request_timeout_ms: int = Field(
        default=DEFAULT_REQUEST_TIMEOUT_MS,
        gt=0,
        le=600_000,
        description="Milliseconds before a pending request is rejected",
    )
    worker_thread_name: str = Field(
        default="fiplan-optimizer",
        description="Name given to the background worker thread",
    )

    @field_validator("worker_thread_name")
    @classmethod
    def validate_thread_name(cls, v: str) -> str:
        """Ensure thread name is not empty."""
        if not v or not v.strip():
            raise ValueError("Worker thread name cannot be empty")
        return v.strip()

    @property
    def request_timeout_seconds(self) -> float:
        """Timeout in seconds, as the event loop expects it."""
        return self.request_timeout_ms / 1000


class FIPlanConfig(BaseSettings):
    """Root configuration for FIPlan.

    Combines the planning assumptions, the optimizer grid and the channel
    settings. Nested values can be set from the environment with a double
    underscore, e.g. ``FIPLAN_OPTIMIZER__MAX_SOLUTIONS=3``.

    Environment Variables:
        FIPLAN_ENV: Environment name (development, staging, production, test)
        FIPLAN_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        config = FIPlanConfig(
            channel=ChannelConfig(request_timeout_ms=5000),
            optimizer=OptimizerSettings(max_solutions=3),
        )
        config.configure_logging()
    """

    model_config = SettingsConfigDict(
        env_prefix="FIPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment settings
    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested configuration
    assumptions: PlanningAssumptions = Field(default_factory=PlanningAssumptions)
    optimizer: OptimizerSettings = Field(default_factory=OptimizerSettings)
    channel: ChannelConfig = Field(default_factory=ChannelConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"

    def configure_logging(self) -> None:
        """Install a structlog logger that drops events below ``log_level``."""
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(
                logging.getLevelName(self.log_level)
            ),
        )


def load_config(**overrides: Any) -> FIPlanConfig:
    """Load FIPlanConfig from the environment, raising ConfigurationError if invalid.

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        The validated configuration
    """
    try:
        return FIPlanConfig(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid configuration: {first.get('msg', 'validation failed')}",
            config_key=key or None,
            expected=first.get("type"),
            actual=first.get("input"),
            details={"error_count": e.error_count()},
        ) from e
