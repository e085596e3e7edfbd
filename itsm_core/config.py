"""
Centralized configuration management for the ITSM core.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Validation using Pydantic
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    AUTH_COOKIE_NAME,
    DEV_AUTH_SECRET,
    PRODUCTION_ENVIRONMENT,
    EnvironmentVariable,
    LogLevel,
)


class DatabaseSettings(BaseModel):
    """Database connection settings read from the environment."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite:///./itsm.db"
        ),
        description="Database connection string",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    echo: bool = Field(default=False, description="Echo SQL statements")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    enable_json_logs: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_JSON.value, "false").lower()
        == "true",
        description="Emit one JSON object per log line",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class SecurityConfig(BaseModel):
    """Credential and token settings."""

    auth_secret: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AUTH_SECRET.value),
        description="HMAC secret for signing auth tokens",
    )
    token_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    token_ttl_days: int = Field(default=7, ge=1, description="Auth token lifetime in days")
    cookie_name: str = Field(default=AUTH_COOKIE_NAME, description="Auth cookie name")
    min_password_length: int = Field(default=6, ge=1, description="Minimum password length")


class FeatureFlags(BaseModel):
    """Feature flags for controlling history tracking."""

    track_assignee_history: bool = Field(
        default=True, description="Write history entries for assignee changes"
    )
    track_priority_history: bool = Field(
        default=True, description="Write history entries for priority changes"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DEBUG.value, "false").lower()
        == "true",
        description="Debug mode",
    )

    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings, description="Database settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == PRODUCTION_ENVIRONMENT

    def get_auth_secret(self) -> Optional[str]:
        """Return the signing secret, falling back to a dev secret outside production."""
        if self.security.auth_secret:
            return self.security.auth_secret
        if self.is_production:
            return None
        return DEV_AUTH_SECRET

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
