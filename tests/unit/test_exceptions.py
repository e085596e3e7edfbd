"""
Unit tests for the exception system.

Tests the exception classes, factory functions and correlation IDs.
"""

import pytest

from itsm_core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BaseError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    ServiceError,
    ValidationError,
    clear_correlation_id,
    duplicate,
    get_correlation_id,
    not_found,
    permission_denied,
    set_correlation_id,
    validation_failed,
)


class TestBaseError:
    """Test BaseError class."""

    def test_basic_error_creation(self):
        error = BaseError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.status_code == 500
        assert error.cause is None
        assert error.context["error_id"] == error.error_id

    def test_error_with_cause(self):
        original = ValueError("Original error")
        error = BaseError("Wrapped error", cause=original)

        assert error.context["cause"]["type"] == "ValueError"
        assert error.error_chain == [error, original]

    def test_error_with_correlation_id(self):
        set_correlation_id("corr-123")
        try:
            error = BaseError("Correlated")
            assert error.context["correlation_id"] == "corr-123"
            assert error.to_dict()["correlation_id"] == "corr-123"
        finally:
            clear_correlation_id()

    def test_to_dict_exposes_short_message(self):
        error = BaseError("Boom", cause=RuntimeError("secret detail"))

        result = error.to_dict()
        assert result["error"] == "Boom"
        assert "cause" not in result
        assert error.to_dict(include_cause=True)["cause"]["message"] == "secret detail"

    def test_add_context_is_fluent(self):
        error = BaseError("x")

        assert error.add_context(ticket_id="t1") is error
        assert error.context["ticket_id"] == "t1"


class TestTaxonomy:
    """Each domain error maps to its HTTP status."""

    @pytest.mark.parametrize(
        "error,status,code",
        [
            (ValidationError("bad"), 400, ErrorCode.VALIDATION_FAILED),
            (AuthenticationError(), 401, ErrorCode.UNAUTHENTICATED),
            (AuthorizationError(), 403, ErrorCode.PERMISSION_DENIED),
            (NotFoundError(), 404, ErrorCode.NOT_FOUND),
            (ConflictError("dup"), 409, ErrorCode.DUPLICATE),
            (ServiceError("oops"), 500, ErrorCode.INTERNAL_ERROR),
        ],
    )
    def test_status_codes(self, error, status, code):
        assert error.status_code == status
        assert error.error_code == code
        assert isinstance(error, BaseError)

    def test_validation_error_records_field(self):
        error = ValidationError("bad", field="title")

        assert error.context["field"] == "title"

    def test_service_error_records_operation(self):
        error = ServiceError("oops", operation="update_ticket")

        assert error.context["operation"] == "update_ticket"


class TestFactories:
    def test_not_found_hides_identifiers_in_message(self):
        error = not_found("Ticket", ticket_id="t-42")

        assert isinstance(error, NotFoundError)
        assert error.message == "Ticket not found"
        assert error.context["ticket_id"] == "t-42"

    def test_duplicate(self):
        error = duplicate("User", "email")

        assert isinstance(error, ConflictError)
        assert error.message == "email already exists"

    def test_validation_failed(self):
        error = validation_failed("name", "a", "must be at least 2 characters")

        assert isinstance(error, ValidationError)
        assert error.message == "name must be at least 2 characters"
        assert error.context["value"] == "a"

    def test_permission_denied(self):
        error = permission_denied("delete", "User", user_id="u1")

        assert isinstance(error, AuthorizationError)
        assert error.context["action"] == "delete"


class TestCorrelationId:
    def test_set_get_clear(self):
        set_correlation_id("abc")
        assert get_correlation_id() == "abc"

        clear_correlation_id()
        assert get_correlation_id() is None

    def test_clear_without_value_is_harmless(self):
        clear_correlation_id()
        clear_correlation_id()
        assert get_correlation_id() is None
