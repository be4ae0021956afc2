"""Request correlation IDs.

Every request gets an ID: the caller's ``X-Request-ID`` when it is a valid
UUID, a fresh UUID4 otherwise. The ID is stored on ``request.state``, bound
to :data:`request_id_var` for log records written while the request is
handled, and echoed in the response header, so an operator log entry can be
matched to the response a client received.
"""

import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

# Request ID of the request being handled, for log formatters
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def is_valid_uuid(value: str) -> bool:
    """Check if a string is a valid UUID."""
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def generate_request_id() -> str:
    """Generate a new UUID4 request ID."""
    return str(uuid.uuid4())


def normalize_request_id(value: str | None) -> str:
    """Keep a caller-supplied ID if it is a UUID, otherwise generate one."""
    if value and is_valid_uuid(value):
        return value
    return generate_request_id()


def get_request_id(request: Request) -> str | None:
    """Request ID stored by the middleware, if the request went through it."""
    return getattr(request.state, "request_id", None)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign, propagate and echo a request ID."""

    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = normalize_request_id(request.headers.get(self.header_name))
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[self.header_name] = request_id
        return response
