"""Structured logging with JSON and text output, plus the access log middleware."""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from servicehealth.middleware.request_id import get_request_id, request_id_var

# Extra record attributes written alongside the message
EXTRA_FIELDS = (
    "method",
    "path",
    "status_code",
    "duration_ms",
    "error_type",
    "error_message",
    "user_agent",
    "client_ip",
    "check",
    "timeout_seconds",
    "service",
    "environment",
    "version",
)

# Subset shown inline by the text formatter
TEXT_FIELDS = ("method", "path", "status_code", "duration_ms", "check", "error_type")


def record_request_id(record: logging.LogRecord) -> str | None:
    """Request ID for a record: explicit ``extra`` first, then the request context."""
    return getattr(record, "request_id", None) or request_id_var.get()


def record_fields(
    record: logging.LogRecord, names: tuple[str, ...] = EXTRA_FIELDS
) -> dict[str, Any]:
    """Non-empty extra attributes of a record, in ``names`` order."""
    fields = {}
    for key in names:
        value = getattr(record, key, None)
        if value is not None:
            fields[key] = value
    return fields


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        request_id = record_request_id(record)
        if request_id:
            log_entry["request_id"] = request_id

        log_entry.update(record_fields(record))

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Text log formatter for development.

    Lines look like ``... - [1b4e28ba] Request completed (method=GET path=/health)``.
    """

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text with request ID prefix and context fields."""
        message = record.getMessage()
        request_id = record_request_id(record)
        if request_id:
            message = f"[{request_id[:8]}] {message}"

        fields = record_fields(record, TEXT_FIELDS)
        if fields:
            pairs = " ".join(f"{key}={value}" for key, value in fields.items())
            message = f"{message} ({pairs})"

        # Format a copy so other handlers see the original record
        formatted = logging.makeLogRecord(record.__dict__)
        formatted.msg = message
        formatted.args = None
        return super().format(formatted)


def configure_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: Output format (json or text).
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter() if format == "json" else TextFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Reduce noise from third-party libraries
    for name in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def client_details(request: Request) -> dict[str, str | None]:
    """Caller identity fields for log entries."""
    return {
        "user_agent": request.headers.get("user-agent"),
        "client_ip": request.client.host if request.client else None,
    }


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log: one entry when a request starts, one when it completes.

    Entries are INFO only. The uncaught-error handler writes the single error
    entry for an internal fault, with the full request context.
    """

    def __init__(self, app, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("servicehealth.access")

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_fields = {
            "request_id": get_request_id(request),
            "method": request.method,
            "path": request.url.path,
        }
        self.logger.info("Request started", extra=request_fields)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start_time) * 1000)

        self.logger.info(
            "Request completed",
            extra={
                **request_fields,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                **client_details(request),
            },
        )
        return response
