"""Error handling utilities for consistent error responses."""

import logging
from enum import Enum
from http import HTTPStatus
from typing import Any, Literal

from servicehealth.models.errors import ErrorReport
from servicehealth.utils.clock import utc_now

logger = logging.getLogger(__name__)

EchoMode = Literal["always", "production", "never"]


class ErrorCategory(str, Enum):
    """Error categories reported in the ``error`` field."""

    NOT_FOUND = "Endpoint not found"
    VALIDATION_ERROR = "Validation Error"
    INTERNAL_ERROR = "Internal Server Error"


# Client-facing messages by category
USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.NOT_FOUND: "The requested endpoint does not exist",
    ErrorCategory.VALIDATION_ERROR: "Request validation failed",
    ErrorCategory.INTERNAL_ERROR: "An unexpected error occurred",
}

# Default message for unknown errors
DEFAULT_USER_MESSAGE = "An unexpected error occurred"

# Maximum length for error messages sent to clients
MAX_ERROR_LENGTH = 500


def get_user_message(category: ErrorCategory | None, default: str | None = None) -> str:
    """Get the client-facing message for an error category.

    Args:
        category: The error category.
        default: Default message if category not found.

    Returns:
        User-friendly error message.
    """
    if category is None:
        return default or DEFAULT_USER_MESSAGE

    return USER_MESSAGES.get(category, default or DEFAULT_USER_MESSAGE)


def truncate_error(error: str, max_length: int = MAX_ERROR_LENGTH) -> str:
    """Truncate error message if too long.

    Args:
        error: The error message.
        max_length: Maximum allowed length.

    Returns:
        Truncated error message.
    """
    if len(error) <= max_length:
        return error

    return error[: max_length - 3] + "..."


def status_phrase(status_code: int) -> str:
    """HTTP reason phrase for a status code, e.g. ``Method Not Allowed``."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def create_error_report(
    category: ErrorCategory | str,
    message: str | None = None,
    request_id: str | None = None,
) -> ErrorReport:
    """Create a standardized error report.

    Args:
        category: Error category, or a free-form category string.
        message: Optional custom message; defaults to the category's message.
        request_id: Optional request ID to echo back.

    Returns:
        ErrorReport model.
    """
    if isinstance(category, ErrorCategory):
        error = category.value
        message = message or get_user_message(category)
    else:
        error = category
        message = message or DEFAULT_USER_MESSAGE

    return ErrorReport(
        error=error,
        message=truncate_error(message),
        timestamp=utc_now(),
        request_id=request_id,
    )


def should_echo_request_id(mode: EchoMode, environment: str) -> bool:
    """Whether error responses include the caller's request ID.

    Args:
        mode: ``always``, ``never``, or ``production`` (only when the service
            runs in the production environment).
        environment: The service environment label.
    """
    if mode == "always":
        return True
    if mode == "production":
        return environment.lower() == "production"
    return False


def log_internal_error(
    exc: BaseException,
    request_id: str | None = None,
    **context: Any,
) -> None:
    """Log an unexpected error with its stack trace and request context.

    This is the only log entry written for an internal fault. The details
    stay in the operator log and are never sent to the client.

    Args:
        exc: The exception that occurred.
        request_id: Optional request ID.
        **context: Additional context to include in log.
    """
    logger.error(
        "Unhandled server error",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "request_id": request_id,
            "error_type": type(exc).__name__,
            "error_message": truncate_error(str(exc)),
            **context,
        },
    )
