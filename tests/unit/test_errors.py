"""Tests for error handling utilities."""

import logging
from datetime import datetime

import pytest

from servicehealth.models.errors import ErrorReport, NotFoundReport
from servicehealth.utils.errors import (
    DEFAULT_USER_MESSAGE,
    ErrorCategory,
    create_error_report,
    get_user_message,
    log_internal_error,
    should_echo_request_id,
    status_phrase,
    truncate_error,
)


class TestErrorCategory:
    """Tests for ErrorCategory enum."""

    def test_category_values(self):
        """Test categories carry the wire strings."""
        assert ErrorCategory.NOT_FOUND.value == "Endpoint not found"
        assert ErrorCategory.INTERNAL_ERROR.value == "Internal Server Error"
        assert ErrorCategory.VALIDATION_ERROR.value == "Validation Error"


class TestGetUserMessage:
    """Tests for get_user_message function."""

    def test_returns_message_for_known_category(self):
        """Test returns user message for known category."""
        assert get_user_message(ErrorCategory.INTERNAL_ERROR) == "An unexpected error occurred"

    def test_returns_default_for_none(self):
        """Test returns default for None category."""
        assert get_user_message(None) == DEFAULT_USER_MESSAGE

    def test_returns_custom_default(self):
        """Test returns custom default when provided."""
        assert get_user_message(None, default="Custom error") == "Custom error"


class TestTruncateError:
    """Tests for truncate_error function."""

    def test_short_message_unchanged(self):
        """Test short messages are unchanged."""
        assert truncate_error("Short error") == "Short error"

    def test_long_message_truncated(self):
        """Test long messages are truncated."""
        result = truncate_error("A" * 1000, max_length=100)
        assert len(result) == 100
        assert result.endswith("...")


class TestStatusPhrase:
    """Tests for status_phrase function."""

    def test_known_status(self):
        """Test known status codes map to reason phrases."""
        assert status_phrase(405) == "Method Not Allowed"
        assert status_phrase(404) == "Not Found"

    def test_unknown_status(self):
        """Test unknown status codes get a generic phrase."""
        assert status_phrase(599) == "Error"


class TestCreateErrorReport:
    """Tests for create_error_report function."""

    def test_category_defaults(self):
        """Test category message is used by default."""
        report = create_error_report(ErrorCategory.INTERNAL_ERROR)
        assert report.error == "Internal Server Error"
        assert report.message == "An unexpected error occurred"
        assert report.request_id is None
        assert isinstance(report.timestamp, datetime)
        assert report.timestamp.tzinfo is not None

    def test_custom_message_and_request_id(self):
        """Test custom message and request ID are kept."""
        report = create_error_report(
            ErrorCategory.VALIDATION_ERROR, message="body.name: required", request_id="abc"
        )
        assert report.message == "body.name: required"
        assert report.request_id == "abc"

    def test_free_form_category(self):
        """Test string categories are accepted."""
        report = create_error_report("Conflict", message="Already exists")
        assert report.error == "Conflict"
        assert report.message == "Already exists"

    def test_message_truncated(self):
        """Test long messages are truncated."""
        report = create_error_report("Bad Request", message="x" * 2000)
        assert len(report.message) == 500

    def test_serializes_request_id_camel_case(self):
        """Test requestId key on the wire and omitted when unset."""
        with_id = create_error_report(ErrorCategory.INTERNAL_ERROR, request_id="abc")
        without_id = create_error_report(ErrorCategory.INTERNAL_ERROR)

        assert with_id.model_dump(mode="json", by_alias=True)["requestId"] == "abc"
        assert "requestId" not in without_id.model_dump(
            mode="json", by_alias=True, exclude_none=True
        )


class TestNotFoundReport:
    """Tests for NotFoundReport model."""

    def test_serializes_available_endpoints(self):
        """Test availableEndpoints key on the wire."""
        report = NotFoundReport(
            error="Endpoint not found",
            message="The endpoint GET /nope does not exist",
            timestamp=datetime.now().astimezone(),
            available_endpoints={"health": {"GET /health": "Comprehensive health check."}},
        )
        data = report.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert data["availableEndpoints"] == {
            "health": {"GET /health": "Comprehensive health check."}
        }
        assert isinstance(report, ErrorReport)


class TestShouldEchoRequestId:
    """Tests for should_echo_request_id function."""

    @pytest.mark.parametrize(
        "mode,environment,expected",
        [
            ("always", "development", True),
            ("always", "production", True),
            ("never", "production", False),
            ("production", "production", True),
            ("production", "Production", True),
            ("production", "staging", False),
        ],
    )
    def test_modes(self, mode, environment, expected):
        """Test each echo mode."""
        assert should_echo_request_id(mode, environment) is expected


class TestLogInternalError:
    """Tests for log_internal_error function."""

    def test_logs_once_with_traceback_and_context(self, caplog):
        """Test a single error record carries the traceback and context."""
        try:
            raise RuntimeError("database password is hunter2")
        except RuntimeError as e:
            exc = e

        with caplog.at_level(logging.ERROR, logger="servicehealth.utils.errors"):
            log_internal_error(exc, request_id="req-1", method="GET", path="/boom")

        records = [r for r in caplog.records if r.name == "servicehealth.utils.errors"]
        assert len(records) == 1
        record = records[0]
        assert record.levelno == logging.ERROR
        assert record.exc_info[0] is RuntimeError
        assert record.error_type == "RuntimeError"
        assert record.error_message == "database password is hunter2"
        assert record.method == "GET"
        assert record.path == "/boom"
        assert record.request_id == "req-1"
