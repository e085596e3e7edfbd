"""Tests for the logging utilities and the operation decorator."""

import json
import logging

import pytest

from itsm_core.config import AppConfig, LoggingConfig, set_config
from itsm_core.context import TenantScope, operation
from itsm_core.exceptions import NotFoundError, get_correlation_id
from itsm_core.utils.json_utils import dumps
from itsm_core.utils.logger import (
    ContextAwareLogger,
    JsonLogFormatter,
    configure_logging,
    get_logger,
)


class TestContextAwareLogger:
    def test_extra_is_rendered_into_message(self, caplog):
        logger = ContextAwareLogger(logging.getLogger("itsm.test"))

        with caplog.at_level(logging.INFO, logger="itsm.test"):
            logger.info("Created ticket", extra={"ticket_id": "t1", "tenant_id": "a"})

        assert "Created ticket | ticket_id=t1 | tenant_id=a" in caplog.text
        assert caplog.records[0].ticket_id == "t1"

    def test_reserved_keys_do_not_break_logging(self, caplog):
        logger = ContextAwareLogger(logging.getLogger("itsm.test"))

        with caplog.at_level(logging.INFO, logger="itsm.test"):
            logger.info("Reserved", extra={"name": "clash", "message": "clash"})

        assert caplog.records[0].ctx_name == "clash"

    def test_exc_info_is_forwarded(self, caplog):
        logger = ContextAwareLogger(logging.getLogger("itsm.test"))

        with caplog.at_level(logging.ERROR, logger="itsm.test"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("Failed")

        assert caplog.records[0].exc_info is not None


class TestConfigureLogging:
    def test_configured_logger_is_returned_by_get_logger(self):
        configured = configure_logging("unit", log_level="DEBUG", json_logs=False)

        assert get_logger() is configured
        assert configured.logger.name == "itsm.unit"
        assert configured.logger.level == logging.DEBUG

    def test_fallback_logger(self):
        assert get_logger().logger.name == "itsm"

    def test_json_formatter(self):
        record = logging.LogRecord("itsm", logging.INFO, __file__, 1, "hello", (), None)
        record.ticket_id = "t1"

        entry = json.loads(JsonLogFormatter().format(record))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["context"]["ticket_id"] == "t1"


class TestJsonUtils:
    def test_dumps_handles_enums_sets_and_models(self):
        scope = TenantScope(tenant_id="a", user_id="u")

        result = json.loads(dumps({"scope": scope, "ids": {"b", "a"}}))

        assert result["scope"] == {"tenant_id": "a", "user_id": "u", "email": None}
        assert result["ids"] == ["a", "b"]


class Widget:
    @operation()
    def ok(self, scope):
        return get_correlation_id()

    @operation(name="widget_fail")
    def fail(self, scope):
        raise NotFoundError()


class TestOperationDecorator:
    @pytest.fixture
    def scope(self):
        set_config(AppConfig(environment="test", logging=LoggingConfig(level="DEBUG")))
        return TenantScope(tenant_id="tenant-1", user_id="user-1")

    def test_logs_enter_and_exit_with_tenant(self, caplog, scope):
        with caplog.at_level(logging.DEBUG, logger="itsm"):
            correlation_id = Widget().ok(scope)

        assert correlation_id is not None
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("ENTER: test_logger.Widget.ok") for m in messages)
        exit_message = next(m for m in messages if m.startswith("EXIT:"))
        assert "tenant_id=tenant-1" in exit_message

    def test_correlation_id_is_cleared_afterwards(self, scope):
        Widget().ok(scope)

        assert get_correlation_id() is None

    def test_domain_errors_are_enriched_and_reraised(self, scope):
        with pytest.raises(NotFoundError) as exc_info:
            Widget().fail(scope)

        assert exc_info.value.context["operation_name"] == "widget_fail"
