"""
Logging for the ITSM core.

Console logs go through ContextAwareLogger, which appends the ``extra``
attributes to the message as pipe-delimited pairs so they survive any
formatter. JSON output is available for log shippers.
"""

import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from ..config import get_config
from .json_utils import dumps

_service_logger = None

# Attributes set by logging.LogRecord itself; passing them in ``extra`` raises KeyError.
_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys() | {"message", "asctime"}
)


class ContextAwareLogger:
    """
    Logger wrapper that formats extra attributes in message while preserving them.
    """

    def __init__(self, logger: logging.Logger):
        """Initialize with an existing logger."""
        self.logger = logger

    def _log_with_formatted_extra(self, level: str, msg: str, **kwargs: Any) -> None:
        """
        Log with extra data formatted into the message.

        Args:
            level: Logging level method to use
            msg: Log message
            **kwargs: Additional arguments including 'extra' and 'exc_info'
        """
        extra = kwargs.pop("extra", None) or {}

        if extra:
            extra_str = " | ".join([f"{k}={v}" for k, v in extra.items()])
            full_msg = f"{msg} | {extra_str}"
        else:
            full_msg = msg

        safe_extra = {
            (f"ctx_{k}" if k in _RESERVED_RECORD_ATTRS else k): v for k, v in extra.items()
        }

        log_method = getattr(self.logger, level)
        log_method(full_msg, extra=safe_extra, **kwargs)

    def set_level(self, level: Union[int, str]) -> None:
        """Set the logging level of the underlying logger."""
        self.logger.setLevel(level)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log_with_formatted_extra("info", msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log_with_formatted_extra("error", msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log_with_formatted_extra("warning", msg, **kwargs)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log_with_formatted_extra("debug", msg, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with formatted extra."""
        self._log_with_formatted_extra("exception", msg, **kwargs)


class JsonLogFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_") and not callable(value)
        }
        if context:
            log_entry["context"] = context

        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": [
                    line.rstrip() for line in traceback.format_exception(*record.exc_info)
                ],
            }

        return dumps(log_entry)


def configure_logging(
    service_name: str,
    log_level: Optional[Union[int, str]] = None,
    json_logs: Optional[bool] = None,
) -> ContextAwareLogger:
    """
    Configure logging with console output.

    Args:
        service_name: Name of the service, used as the logger name suffix
        log_level: Logging level (default: from config)
        json_logs: Emit JSON lines instead of plain text (default: from config)

    Returns:
        The configured logger wrapped with ContextAwareLogger
    """
    global _service_logger

    app_config = get_config()

    if log_level is None:
        log_level = app_config.logging.level
    if json_logs is None:
        json_logs = app_config.logging.enable_json_logs

    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"itsm.{service_name}")
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    if json_logs:
        console_handler.setFormatter(JsonLogFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    logger.addHandler(console_handler)

    wrapped_logger = ContextAwareLogger(logger)
    wrapped_logger.info(
        "Service logger configured",
        extra={"service_name": service_name, "json_logs": json_logs},
    )
    _service_logger = wrapped_logger
    return wrapped_logger


def get_logger(log_level: Optional[Union[int, str]] = None) -> ContextAwareLogger:
    """
    Get the service logger.

    Falls back to a wrapped ``itsm`` logger when configure_logging() has not
    been called.

    Args:
        log_level: Optional log level to set

    Returns:
        Logger instance
    """
    if _service_logger is not None:
        if log_level is not None:
            _service_logger.set_level(log_level)
        return _service_logger

    logger = logging.getLogger("itsm")

    if log_level is None:
        log_level = get_config().logging.level

    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(log_level)

    return ContextAwareLogger(logger)


def reset_logging() -> None:
    """Forget the configured service logger."""
    global _service_logger
    _service_logger = None
