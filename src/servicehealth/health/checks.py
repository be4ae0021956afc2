"""Dependency check implementations.

Every check implements :class:`HealthCheck`: it has a unique name, an
optional execution timeout, a readiness flag, and an async ``run`` method that
returns a :class:`CheckResult` or raises. The runner turns exceptions and
timeouts into ``error`` results, so checks only handle the failures they
can classify more precisely.
"""

import asyncio
import inspect
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from concurrent.futures import Future
from typing import Union
from urllib.parse import urlsplit

import httpx

from servicehealth.config import CheckConfig, HealthSettings
from servicehealth.models.health import CheckResult

logger = logging.getLogger(__name__)

CheckFunction = Callable[[], Union[CheckResult, Awaitable[CheckResult]]]

# Ports assumed when a database URL does not name one
DEFAULT_DATABASE_PORTS = {
    "postgres": 5432,
    "postgresql": 5432,
    "mysql": 3306,
    "mariadb": 3306,
    "mssql": 1433,
    "redis": 6379,
    "rediss": 6379,
    "mongodb": 27017,
    "amqp": 5672,
}


class CheckRegistrationError(ValueError):
    """Raised for an invalid check definition or registration."""


class HealthCheck(ABC):
    """A named, independently timed check of one dependency."""

    kind = "generic"

    def __init__(
        self,
        name: str,
        timeout_seconds: float | None = None,
        readiness: bool = True,
    ):
        if not name or not name.strip():
            raise CheckRegistrationError("Health check name must not be empty")
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise CheckRegistrationError(
                f"Health check {name!r} timeout must be positive, got {timeout_seconds}"
            )

        self.name = name
        self.timeout_seconds = timeout_seconds
        self.readiness = readiness
        self._pending: Future | None = None

    @abstractmethod
    async def run(self) -> CheckResult:
        """Check the dependency and report its state."""

    async def call(self, func: CheckFunction) -> CheckResult:
        """Invoke a check callable without blocking the event loop or other checks.

        Coroutine functions are awaited directly. Plain functions run on a
        daemon thread owned by this check. A timed-out thread cannot be
        stopped, so while it is still running later calls wait on it instead
        of starting another one: a hung check holds a single thread and never
        delays the other checks.
        """
        if inspect.iscoroutinefunction(func):
            return await func()

        if self._pending is None or self._pending.done():
            self._pending = self._start_thread(func)

        result = await asyncio.wrap_future(self._pending)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _start_thread(self, func: CheckFunction) -> Future:
        future: Future = Future()
        # Running futures cannot be cancelled by a caller that timed out
        future.set_running_or_notify_cancel()

        def target() -> None:
            try:
                future.set_result(func())
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=target, name=f"health-check-{self.name}", daemon=True).start()
        return future

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"timeout_seconds={self.timeout_seconds!r}, readiness={self.readiness!r})"
        )


class FunctionCheck(HealthCheck):
    """Check backed by a user-supplied function."""

    def __init__(
        self,
        name: str,
        func: CheckFunction,
        timeout_seconds: float | None = None,
        readiness: bool = True,
    ):
        super().__init__(name, timeout_seconds=timeout_seconds, readiness=readiness)
        self.func = func

    async def run(self) -> CheckResult:
        return await self.call(self.func)


class DatabaseCheck(HealthCheck):
    """Database reachability check.

    With a ``ping`` callable (for example a driver's ``ping`` or a
    ``SELECT 1``), the ping decides: it returns a CheckResult or its string
    value, or returns any non-string value to mean ready, or raises. An
    unknown string raises ``ValueError``. Without one, the check opens a TCP
    connection to the host and port of ``url``.
    """

    kind = "database"

    def __init__(
        self,
        name: str,
        url: str | None = None,
        ping: CheckFunction | None = None,
        timeout_seconds: float | None = None,
        readiness: bool = True,
    ):
        super().__init__(name, timeout_seconds=timeout_seconds, readiness=readiness)
        if ping is None and not url:
            raise CheckRegistrationError(
                f"Database check {name!r} needs either a url or a ping function"
            )

        self.ping = ping
        self.address = parse_database_address(url) if ping is None else None

    async def run(self) -> CheckResult:
        if self.ping is not None:
            result = await self.call(self.ping)
            # Strings are check results, as for function checks
            if isinstance(result, str):
                return CheckResult(result)
            return CheckResult.READY

        host, port = self.address
        try:
            _, writer = await asyncio.open_connection(host, port)
        except OSError as e:
            logger.warning(
                f"Database check failed: {e}",
                extra={"check": self.name, "error_type": type(e).__name__},
            )
            return CheckResult.ERROR

        writer.close()
        await writer.wait_closed()
        return CheckResult.READY


def parse_database_address(url: str) -> tuple[str, int]:
    """Extract host and port from a database URL.

    Driver suffixes such as ``postgresql+asyncpg`` are ignored when looking up
    the default port.

    Raises:
        CheckRegistrationError: If the URL has no host or no resolvable port.
    """
    parts = urlsplit(url)
    if not parts.hostname:
        raise CheckRegistrationError(f"Database URL has no host: {url!r}")

    try:
        port = parts.port
    except ValueError as e:
        raise CheckRegistrationError(f"Database URL has an invalid port: {url!r}") from e

    if port is None:
        scheme = parts.scheme.split("+", 1)[0].lower()
        port = DEFAULT_DATABASE_PORTS.get(scheme)
        if port is None:
            raise CheckRegistrationError(
                f"Database URL {url!r} has no port and scheme {scheme!r} has no default"
            )

    return parts.hostname, port


class ExternalApiCheck(HealthCheck):
    """HTTP reachability check for an upstream API."""

    kind = "external_api"

    def __init__(
        self,
        name: str,
        url: str,
        headers: dict[str, str] | None = None,
        latency_degraded_ms: int = 2000,
        timeout_seconds: float | None = None,
        readiness: bool = True,
    ):
        super().__init__(name, timeout_seconds=timeout_seconds, readiness=readiness)
        if not url:
            raise CheckRegistrationError(f"External API check {name!r} needs a url")

        self.url = url
        self.headers = headers or {}
        self.latency_degraded_ms = latency_degraded_ms

    async def run(self) -> CheckResult:
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(self.url, headers=self.headers)
        except httpx.TimeoutException:
            logger.warning("External API check timed out", extra={"check": self.name})
            return CheckResult.ERROR
        except httpx.RequestError as e:
            logger.warning(
                f"External API check failed: {e}",
                extra={"check": self.name, "error_type": type(e).__name__},
            )
            return CheckResult.ERROR

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        status_code = response.status_code

        if 200 <= status_code < 300:
            if latency_ms > self.latency_degraded_ms:
                logger.info(
                    f"External API check slow: {latency_ms}ms",
                    extra={"check": self.name, "duration_ms": latency_ms},
                )
                return CheckResult.DEGRADED
            return CheckResult.READY

        logger.warning(
            f"External API check got unexpected status code: {status_code}",
            extra={"check": self.name, "status_code": status_code},
        )
        if status_code in (401, 403) or status_code >= 500:
            return CheckResult.ERROR
        return CheckResult.WARNING


class DependencyCheck(HealthCheck):
    """Check that a dependency is configured, then optionally verify it.

    The presence of ``required_env`` variables is read once, when the check
    is created.
    """

    kind = "dependency"

    def __init__(
        self,
        name: str,
        required_env: Iterable[str] = (),
        verify: CheckFunction | None = None,
        timeout_seconds: float | None = None,
        readiness: bool = True,
    ):
        super().__init__(name, timeout_seconds=timeout_seconds, readiness=readiness)
        self.required_env = tuple(required_env)
        self.missing_env = tuple(var for var in self.required_env if not os.environ.get(var))
        self.verify = verify

    async def run(self) -> CheckResult:
        if self.missing_env:
            return CheckResult.NOT_CONFIGURED

        if self.verify is None:
            return CheckResult.READY

        return await self.call(self.verify)


def check_from_config(config: CheckConfig, health: HealthSettings) -> HealthCheck:
    """Build a check from its declarative configuration."""
    if config.kind == "database":
        return DatabaseCheck(
            config.name,
            url=config.url,
            timeout_seconds=config.timeout_seconds,
            readiness=config.readiness,
        )

    if config.kind == "external_api":
        return ExternalApiCheck(
            config.name,
            url=config.url or "",
            latency_degraded_ms=health.latency_degraded_ms,
            timeout_seconds=config.timeout_seconds,
            readiness=config.readiness,
        )

    return DependencyCheck(
        config.name,
        required_env=config.required_env,
        timeout_seconds=config.timeout_seconds,
        readiness=config.readiness,
    )
