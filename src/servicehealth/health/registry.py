"""Registry of named dependency checks."""

import logging
from collections.abc import Callable, Iterator

from servicehealth.config import HealthSettings
from servicehealth.health.checks import (
    CheckFunction,
    CheckRegistrationError,
    FunctionCheck,
    HealthCheck,
    check_from_config,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class CheckRegistry:
    """Named dependency checks, filled at startup and read-only afterwards.

    Registration errors (duplicate names, registering after the registry was
    frozen) raise :class:`CheckRegistrationError` immediately, so a
    misconfigured service fails at startup instead of at request time.
    """

    def __init__(self, default_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        if default_timeout_seconds <= 0:
            raise CheckRegistrationError("Default check timeout must be positive")

        self.default_timeout_seconds = default_timeout_seconds
        self._checks: dict[str, HealthCheck] = {}
        self._frozen = False

    def register(self, check: HealthCheck) -> HealthCheck:
        """Register a check under its name.

        Raises:
            CheckRegistrationError: If the name is taken or the registry is frozen.
        """
        if self._frozen:
            raise CheckRegistrationError(
                f"Cannot register {check.name!r}: registry is frozen after startup"
            )
        if check.name in self._checks:
            raise CheckRegistrationError(f"Duplicate health check name: {check.name!r}")

        self._checks[check.name] = check
        logger.debug(
            f"Registered {check.kind} health check {check.name!r}",
            extra={"check": check.name, "timeout_seconds": self.timeout_for(check)},
        )
        return check

    def check(
        self,
        name: str | None = None,
        *,
        timeout_seconds: float | None = None,
        readiness: bool = True,
    ) -> Callable[[CheckFunction], CheckFunction]:
        """Decorator registering a function as a check.

        Example:
            @registry.check("cache", timeout_seconds=1.0)
            async def cache_check() -> CheckResult:
                ...
        """

        def decorator(func: CheckFunction) -> CheckFunction:
            self.register(
                FunctionCheck(
                    name or func.__name__,
                    func,
                    timeout_seconds=timeout_seconds,
                    readiness=readiness,
                )
            )
            return func

        return decorator

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def timeout_for(self, check: HealthCheck) -> float:
        """Effective timeout of a check."""
        if check.timeout_seconds is not None:
            return check.timeout_seconds
        return self.default_timeout_seconds

    def get(self, name: str) -> HealthCheck | None:
        return self._checks.get(name)

    def all_checks(self) -> list[HealthCheck]:
        return list(self._checks.values())

    def readiness_checks(self) -> list[HealthCheck]:
        """Checks that decide whether this instance can accept traffic."""
        return [check for check in self._checks.values() if check.readiness]

    def __contains__(self, name: object) -> bool:
        return name in self._checks

    def __iter__(self) -> Iterator[HealthCheck]:
        return iter(list(self._checks.values()))

    def __len__(self) -> int:
        return len(self._checks)


def build_registry(settings: HealthSettings) -> CheckRegistry:
    """Create a registry holding the checks declared in configuration."""
    registry = CheckRegistry(default_timeout_seconds=settings.timeout_seconds)
    for config in settings.checks:
        registry.register(check_from_config(config, settings))
    return registry
