"""Utility functions for error responses and timestamps."""

from servicehealth.utils.clock import utc_now
from servicehealth.utils.errors import (
    ErrorCategory,
    create_error_report,
    log_internal_error,
    should_echo_request_id,
    truncate_error,
)

__all__ = [
    "ErrorCategory",
    "create_error_report",
    "log_internal_error",
    "should_echo_request_id",
    "truncate_error",
    "utc_now",
]
