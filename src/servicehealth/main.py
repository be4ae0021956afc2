"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from servicehealth import __version__
from servicehealth.api.routes import api_router
from servicehealth.config import Settings, get_settings
from servicehealth.context import ServiceContext
from servicehealth.health.registry import CheckRegistry
from servicehealth.middleware.errors import ErrorHandlers, endpoint_catalog
from servicehealth.middleware.logging import LoggingMiddleware, configure_logging
from servicehealth.middleware.request_id import RequestIdMiddleware
from servicehealth.middleware.security import SecurityHeadersMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown events."""
    # Startup
    settings: Settings = app.state.settings
    context: ServiceContext = app.state.context

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
    )

    logger.info(
        f"Starting {context.info.name}",
        extra={
            "service": context.info.name,
            "version": context.info.version,
            "environment": context.info.environment,
        },
    )

    for category, endpoints in endpoint_catalog(app).items():
        for endpoint in endpoints:
            logger.info(f"Available {category} endpoint: {endpoint}")

    logger.info(
        f"{context.info.name} started with {len(context.registry)} health checks"
    )

    yield

    # Shutdown
    logger.info(f"Shutting down {context.info.name}")


def create_app(
    settings: Settings | None = None,
    registry: CheckRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Checks registered on ``registry`` before this call are combined with the
    checks declared in ``settings.health.checks``; the registry is read-only
    afterwards.

    Args:
        settings: Optional settings override for testing.
        registry: Optional registry holding checks registered in code.

    Returns:
        Configured FastAPI application.

    Raises:
        ValueError: If the configuration is invalid, including
            CheckRegistrationError for checks that cannot be registered.
    """
    if settings is None:
        settings = get_settings()

    try:
        settings.validate_required()
        context = ServiceContext.from_settings(settings, registry=registry)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    app = FastAPI(
        title=context.info.name,
        description="Service health reporting and structured error handling",
        version=context.info.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context = context

    # Error handling first: its catch-all middleware must be innermost
    ErrorHandlers(
        echo_request_id=settings.errors.echo_request_id,
        environment=context.info.environment,
    ).install(app)

    # Configure middleware (order matters - last added = first executed)
    if settings.security_headers.enabled:
        app.add_middleware(SecurityHeadersMiddleware)

    # Logging middleware - logs requests with timing
    app.add_middleware(LoggingMiddleware)

    # Request ID middleware - runs before logging so log entries carry the ID
    app.add_middleware(RequestIdMiddleware)

    # CORS should be outermost to handle preflight requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.server.cors.allowed_methods,
        allow_headers=settings.server.cors.allowed_headers,
    )

    app.include_router(api_router)

    return app


def main() -> None:
    """Run the service with uvicorn.

    uvicorn stops accepting connections on SIGTERM or SIGINT, lets in-flight
    requests finish (up to ``server.shutdown_timeout_seconds``), runs the
    lifespan shutdown and exits.
    """
    settings = get_settings()
    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
    )
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
        access_log=False,
        server_header=False,
        timeout_graceful_shutdown=settings.server.shutdown_timeout_seconds,
    )


if __name__ == "__main__":
    main()
