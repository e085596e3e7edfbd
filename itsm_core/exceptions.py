"""
Exception hierarchy for the ITSM core.

Every domain error carries an error code, the HTTP status it maps to at the
boundary, a context dictionary and a correlation ID when one is set. Errors
log themselves when constructed so callers only need to raise them.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"

    # Access errors (4xxx)
    PERMISSION_DENIED = "4003"
    UNAUTHENTICATED = "4010"


class BaseError(Exception):
    """Base exception with context, error codes, logging, and error chaining."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code for API responses
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Imported lazily: the logger reads config, which may raise our errors
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        if self.status_code >= 500:
            logger.error(
                f"Error {self.error_code.value}: {self.message}", extra=log_data, exc_info=self.cause
            )
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code.value}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code.value}: {self.message}", extra=log_data)

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        """
        Convert to dict for API responses.

        The short ``error`` message is what the HTTP boundary exposes; the
        remaining keys are useful for internal tooling only.
        """
        result: Dict[str, Any] = {
            "error": self.message,
            "code": self.error_code.value,
            "error_id": self.error_id,
        }

        if "correlation_id" in self.context:
            result["correlation_id"] = self.context["correlation_id"]

        if include_cause and "cause" in self.context:
            result["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }

        return result

    def add_context(self, **kwargs: Any) -> "BaseError":
        """Add additional context to the error (fluent interface)."""
        self.context.update(kwargs)
        return self

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


class ValidationError(BaseError):
    """Missing or malformed input."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class AuthenticationError(BaseError):
    """No credential, or a credential that does not verify."""

    def __init__(self, message: str = "unauthorized", cause: Optional[Exception] = None, **context):
        super().__init__(message, ErrorCode.UNAUTHENTICATED, 401, cause, **context)


class AuthorizationError(BaseError):
    """Authenticated, but the action is forbidden (e.g. cross-tenant mutation)."""

    def __init__(self, message: str = "forbidden", cause: Optional[Exception] = None, **context):
        super().__init__(message, ErrorCode.PERMISSION_DENIED, 403, cause, **context)


class NotFoundError(BaseError):
    """Entity absent, or outside the caller's tenant."""

    def __init__(self, message: str = "not found", cause: Optional[Exception] = None, **context):
        super().__init__(message, ErrorCode.NOT_FOUND, 404, cause, **context)


class ConflictError(BaseError):
    """Unique constraint violation, e.g. duplicate email."""

    def __init__(self, message: str, cause: Optional[Exception] = None, **context):
        super().__init__(message, ErrorCode.DUPLICATE, 409, cause, **context)


class ServiceError(BaseError):
    """Unexpected storage or internal failure."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


# Factory functions for common error patterns
def not_found(resource_type: str, cause: Optional[Exception] = None, **identifiers) -> NotFoundError:
    """
    Factory for not found errors.

    The message deliberately carries no identifiers so that an out-of-tenant
    lookup is indistinguishable from a missing row.

    Args:
        resource_type: Type of resource (e.g., 'Ticket', 'Category')
        cause: Original exception if any
        **identifiers: Resource identifiers, kept in the error context

    Returns:
        Configured NotFoundError instance
    """
    return NotFoundError(
        f"{resource_type} not found", cause=cause, resource_type=resource_type, **identifiers
    )


def duplicate(
    resource_type: str, field: str, cause: Optional[Exception] = None, **identifiers
) -> ConflictError:
    """
    Factory for duplicate resource errors.

    Args:
        resource_type: Type of resource (e.g., 'User')
        field: The unique field that collided
        cause: Original exception if any
        **identifiers: Resource identifiers

    Returns:
        Configured ConflictError instance
    """
    return ConflictError(
        f"{field} already exists",
        cause=cause,
        resource_type=resource_type,
        field=field,
        **identifiers,
    )


def validation_failed(
    field: str, value: Any, reason: str, cause: Optional[Exception] = None
) -> ValidationError:
    """
    Factory for validation errors.

    Args:
        field: Field that failed validation
        value: The invalid value
        reason: Why validation failed
        cause: Original exception if any

    Returns:
        Configured ValidationError instance
    """
    return ValidationError(
        f"{field} {reason}",
        field=field,
        error_code=ErrorCode.VALIDATION_FAILED,
        cause=cause,
        value=str(value),
        reason=reason,
    )


def permission_denied(
    action: str, resource: str, cause: Optional[Exception] = None, **context
) -> AuthorizationError:
    """
    Factory for permission denied errors.

    Args:
        action: Action that was denied (e.g., 'delete')
        resource: Resource being accessed
        cause: Original exception if any
        **context: Additional context

    Returns:
        Configured AuthorizationError instance
    """
    return AuthorizationError(
        "forbidden", cause=cause, action=action, resource=resource, **context
    )


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
