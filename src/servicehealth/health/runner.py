"""Concurrent execution of dependency checks."""

import asyncio
import logging
from collections.abc import Iterable

from servicehealth.health.checks import HealthCheck
from servicehealth.health.registry import CheckRegistry
from servicehealth.models.health import CheckResult

logger = logging.getLogger(__name__)


async def run_check(check: HealthCheck, timeout_seconds: float) -> CheckResult:
    """Run one check, recording timeouts and failures as ``error``.

    Never raises, except for cancellation of the calling task.
    """
    try:
        result = await asyncio.wait_for(check.run(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(
            f"Health check {check.name!r} timed out after {timeout_seconds}s",
            extra={"check": check.name, "timeout_seconds": timeout_seconds},
        )
        return CheckResult.ERROR
    except Exception as e:
        logger.exception(
            f"Health check {check.name!r} failed",
            extra={"check": check.name, "error_type": type(e).__name__},
        )
        return CheckResult.ERROR

    try:
        return CheckResult(result)
    except (ValueError, TypeError):
        logger.error(
            f"Health check {check.name!r} returned an invalid result: {result!r}",
            extra={"check": check.name},
        )
        return CheckResult.ERROR


async def run_checks(
    checks: Iterable[HealthCheck], registry: CheckRegistry
) -> dict[str, CheckResult]:
    """Run checks concurrently and wait for all of them.

    Each check is bounded by its own timeout, so the whole call takes about
    as long as the slowest timeout. Results keep registration order.
    """
    checks = list(checks)
    results = await asyncio.gather(
        *(run_check(check, registry.timeout_for(check)) for check in checks)
    )
    return {check.name: result for check, result in zip(checks, results)}
