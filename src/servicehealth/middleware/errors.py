"""Exception handlers producing structured JSON error bodies.

Handled paths, all using the ErrorReport shape:

- requests that matched no route: 404 with a catalogue of the endpoints that
  do exist, not logged as an incident
- HTTP errors raised deliberately by a route: their own status code
- request validation failures: 422
- anything else: 500 with a generic message. The exception is logged once
  with full context and never reaches the response body.
"""

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from servicehealth.middleware.logging import client_details
from servicehealth.middleware.request_id import get_request_id
from servicehealth.models.errors import ErrorReport, NotFoundReport
from servicehealth.utils.clock import utc_now
from servicehealth.utils.errors import (
    EchoMode,
    ErrorCategory,
    create_error_report,
    log_internal_error,
    should_echo_request_id,
    status_phrase,
    truncate_error,
)

logger = logging.getLogger(__name__)

ENDPOINT_CATEGORIES = ("ui", "health", "api", "webhooks")


HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})


def endpoint_category(path: str) -> str:
    """Classify a route path into one of the discovery categories."""
    if path == "/":
        return "ui"
    if path == "/health" or path.startswith("/health/"):
        return "health"
    if path.startswith("/webhook"):
        return "webhooks"
    return "api"


def describe_operation(operation: dict) -> str:
    """One-line description of an OpenAPI operation.

    The first line of the route's docstring, else its summary (FastAPI
    derives one from the function name).
    """
    description = (operation.get("description") or "").strip()
    if description:
        return description.splitlines()[0]
    return operation.get("summary", "")


def endpoint_catalog(app: FastAPI) -> dict[str, dict[str, str]]:
    """Group the application's documented routes by category.

    Routes come from the OpenAPI schema, so routes in included routers are
    listed and routes hidden with ``include_in_schema=False`` are not. The
    schema is cached by FastAPI after its first generation.

    Returns:
        Mapping of category to ``{"METHOD /path": description}``. Every
        category is present, even when empty.
    """
    catalog: dict[str, dict[str, str]] = {category: {} for category in ENDPOINT_CATEGORIES}

    for path, operations in app.openapi().get("paths", {}).items():
        for method, operation in sorted(operations.items()):
            if method not in HTTP_METHODS:
                continue
            catalog[endpoint_category(path)][f"{method.upper()} {path}"] = describe_operation(
                operation
            )

    return catalog


def error_response(report: ErrorReport, status_code: int, headers=None) -> JSONResponse:
    """Serialize an error report with camelCase keys, dropping unset fields."""
    return JSONResponse(
        status_code=status_code,
        content=report.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=headers,
    )


class ErrorHandlers:
    """Exception handlers bound to the service's request-ID echo policy."""

    def __init__(self, echo_request_id: EchoMode = "always", environment: str = "development"):
        self.echo_request_id = should_echo_request_id(echo_request_id, environment)

    def install(self, app: FastAPI) -> None:
        """Register the handlers on an application.

        Call this before adding other middleware: uncaught errors are turned
        into responses by the innermost middleware, so outer middleware still
        sees the 500 response and nothing is re-raised to the server.
        """
        app.add_exception_handler(StarletteHTTPException, self.http_error)
        app.add_exception_handler(RequestValidationError, self.validation_error)
        app.add_middleware(UnhandledErrorMiddleware, handlers=self)
        # Errors raised by outer middleware still reach this handler
        app.add_exception_handler(Exception, self.unhandled_error)

    def _request_id(self, request: Request) -> str | None:
        if not self.echo_request_id:
            return None
        return get_request_id(request) or request.headers.get("X-Request-ID")

    async def http_error(
        self, request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP errors, answering unmatched routes with discovery info."""
        # Routing misses never reach an endpoint, so the scope has none
        if exc.status_code == 404 and "endpoint" not in request.scope:
            return await self.not_found(request, exc)

        report = create_error_report(
            status_phrase(exc.status_code),
            message=str(exc.detail) if exc.detail else None,
            request_id=self._request_id(request),
        )
        return error_response(report, exc.status_code, headers=getattr(exc, "headers", None))

    async def not_found(self, request: Request, exc: Exception | None = None) -> JSONResponse:
        """Handle requests that matched no route."""
        logger.debug(
            "No route matched",
            extra={"method": request.method, "path": request.url.path},
        )
        report = NotFoundReport(
            error=ErrorCategory.NOT_FOUND.value,
            message=truncate_error(
                f"The endpoint {request.method} {request.url.path} does not exist"
            ),
            timestamp=utc_now(),
            request_id=self._request_id(request),
            available_endpoints=endpoint_catalog(request.app),
        )
        return error_response(report, 404)

    async def validation_error(
        self, request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        errors = exc.errors()
        message = None
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = f"{location}: {first.get('msg', 'invalid value')}"

        report = create_error_report(
            ErrorCategory.VALIDATION_ERROR,
            message=message,
            request_id=self._request_id(request),
        )
        return error_response(report, 422)

    async def unhandled_error(self, request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors without leaking their details."""
        log_internal_error(
            exc,
            request_id=get_request_id(request),
            method=request.method,
            path=request.url.path,
            **client_details(request),
        )

        report = create_error_report(
            ErrorCategory.INTERNAL_ERROR,
            request_id=self._request_id(request),
        )
        return error_response(report, 500)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Answer uncaught errors from routes with the generic 500 response."""

    def __init__(self, app, handlers: ErrorHandlers):
        super().__init__(app)
        self.handlers = handlers

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await self.handlers.unhandled_error(request, exc)
