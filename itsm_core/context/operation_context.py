"""
Operation context for handling cross-cutting concerns.

This module provides context management for service operations: entry/exit
logging, durations, correlation IDs and error enrichment.
"""

import time
import uuid
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar, Union, cast

from ..constants import LogContextKey
from ..exceptions import (
    BaseError,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from ..utils.logger import ContextAwareLogger, get_logger
from .tenant_context import TenantScope


class OperationContext:
    """Context for a specific operation."""

    def __init__(self, operation_name: str, correlation_id: Optional[str] = None, **context):
        self.operation_name = operation_name
        self.operation_id = str(uuid.uuid4())

        self.correlation_id = correlation_id or get_correlation_id() or str(uuid.uuid4())
        set_correlation_id(self.correlation_id)

        self.context = context
        self.context["operation_id"] = self.operation_id
        self.context["correlation_id"] = self.correlation_id

        self.start_time = time.time()

    @property
    def duration_ms(self) -> float:
        """Get the operation duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


class OperationHandler:
    """Handles operation logging and error enrichment."""

    def __init__(self, logger: Optional[ContextAwareLogger] = None):
        self.logger = logger if logger is not None else get_logger()

    @contextmanager
    def operation(self, name: str, **context):
        """Context manager for operations."""
        # The outermost operation on a thread owns the correlation id and clears it on exit
        owns_correlation_id = get_correlation_id() is None
        op_ctx = OperationContext(name, **context)

        self.logger.debug(
            f"ENTER: {name}",
            extra={
                **context,
                "operation_id": op_ctx.operation_id,
                "correlation_id": op_ctx.correlation_id,
            },
        )

        try:
            yield op_ctx

            self.logger.info(
                f"EXIT: {name}",
                extra={
                    **context,
                    "operation_id": op_ctx.operation_id,
                    "correlation_id": op_ctx.correlation_id,
                    "duration_ms": round(op_ctx.duration_ms, 2),
                    "status": "success",
                },
            )

        except BaseError as e:
            # BaseError already logged itself; add where it happened
            e.add_context(
                operation_name=name,
                operation_id=op_ctx.operation_id,
                operation_duration_ms=op_ctx.duration_ms,
            )
            log_method = self.logger.error if e.status_code >= 500 else self.logger.info
            log_method(
                f"ERROR: {name} -> {e.error_code.value}: {e.message}",
                extra={
                    **context,
                    "operation_id": op_ctx.operation_id,
                    "correlation_id": op_ctx.correlation_id,
                    "duration_ms": round(op_ctx.duration_ms, 2),
                    "error_id": e.error_id,
                    "error_code": e.error_code.value,
                    "status": "error",
                },
            )
            raise

        except Exception as e:
            self.logger.exception(
                f"ERROR: {name} -> {type(e).__name__}: {str(e)}",
                extra={
                    **context,
                    "operation_id": op_ctx.operation_id,
                    "correlation_id": op_ctx.correlation_id,
                    "duration_ms": round(op_ctx.duration_ms, 2),
                    "error_type": type(e).__name__,
                    "status": "error",
                },
            )
            raise

        finally:
            if owns_correlation_id:
                clear_correlation_id()


F = TypeVar("F", bound=Callable[..., Any])


def _find_scope(args, kwargs) -> Optional[TenantScope]:
    for value in list(args) + list(kwargs.values()):
        if isinstance(value, TenantScope):
            return value
    return None


def operation(name: Union[Optional[str], Callable] = None):
    """
    Decorator for service operations.

    Args:
        name: Optional operation name. If not provided, a name will be generated
             from module, class and function information.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            if name is not None:
                op_name = name
            else:
                op_name = func.__name__
                if args and hasattr(args[0], func.__name__):
                    op_name = f"{args[0].__class__.__name__}.{op_name}"
                module_name = func.__module__.split(".")[-1]
                op_name = f"{module_name}.{op_name}"

            context: Dict[str, Any] = {LogContextKey.SOURCE_MODULE.value: func.__module__}

            scope = _find_scope(args, kwargs)
            if scope is not None:
                context[LogContextKey.TENANT_ID.value] = scope.tenant_id
                context[LogContextKey.USER_ID.value] = scope.user_id

            handler = OperationHandler()
            with handler.operation(op_name, **context):
                return func(*args, **kwargs)

        return cast(F, wrapper)

    # Handle case where decorator is used without parentheses
    if callable(name):
        func, name = name, None
        return decorator(func)

    return decorator
