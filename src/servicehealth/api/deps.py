"""Dependency injection for API handlers."""

from typing import Annotated

from fastapi import Depends, Request

from servicehealth.context import ServiceContext
from servicehealth.health.responder import HealthResponder


def get_context(request: Request) -> ServiceContext:
    """Get the process-scoped service context.

    The context is created by ``create_app`` and stored on ``app.state``;
    override this dependency to inject a different one in tests.
    """
    return request.app.state.context


ContextDep = Annotated[ServiceContext, Depends(get_context)]


def get_responder(context: ContextDep) -> HealthResponder:
    """Get a health responder bound to the service context."""
    return HealthResponder(context)


ResponderDep = Annotated[HealthResponder, Depends(get_responder)]
