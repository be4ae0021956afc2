"""Process-scoped state shared by request handlers."""

import time
from collections.abc import Callable

from servicehealth.config import ErrorSettings, Settings
from servicehealth.health.registry import CheckRegistry, build_registry
from servicehealth.models.info import ServiceInfo


class ServiceContext:
    """State created once at startup and only read afterwards.

    Holds the service identity, the process start time and the check
    registry. The registry is frozen on construction.
    """

    def __init__(
        self,
        info: ServiceInfo,
        registry: CheckRegistry,
        errors: ErrorSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        registry.freeze()

        self.info = info
        self.registry = registry
        self.errors = errors or ErrorSettings()
        self._clock = clock
        self.started_at = clock()

    @classmethod
    def from_settings(
        cls, settings: Settings, registry: CheckRegistry | None = None
    ) -> "ServiceContext":
        """Build the context from settings.

        Checks declared in ``settings.health.checks`` are added to ``registry``
        (or to a new registry when none is given).

        Raises:
            CheckRegistrationError: If a configured check is invalid or
                duplicates a check registered in code.
        """
        configured = build_registry(settings.health)
        if registry is None:
            registry = configured
        else:
            for check in configured:
                registry.register(check)

        info = ServiceInfo(
            name=settings.service.name,
            version=settings.service.version,
            environment=settings.service.environment,
        )
        return cls(info=info, registry=registry, errors=settings.errors)

    def uptime(self) -> float:
        """Seconds since the context was created."""
        return self._clock() - self.started_at
