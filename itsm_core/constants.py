"""
Constants and enums for the ITSM core.

This module centralizes the magic strings used throughout the package
so that configuration keys and log context keys stay consistent.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    LOG_JSON = "LOG_JSON"
    AUTH_SECRET = "AUTH_SECRET"
    DEBUG = "DEBUG"


class LogContextKey(str, Enum):
    """Standard keys for logging context."""

    TENANT_ID = "tenant_id"
    USER_ID = "user_id"
    SOURCE_MODULE = "source_module"


PRODUCTION_ENVIRONMENT = "production"
DEV_AUTH_SECRET = "dev-secret-change-me"
AUTH_COOKIE_NAME = "auth"
CATEGORY_PATH_SEPARATOR = " / "
RECENT_TICKET_DAYS = 10
RECENT_TICKET_LIMIT = 10
