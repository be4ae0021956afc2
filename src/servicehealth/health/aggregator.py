"""Reduction of per-check results into an overall status.

Pure functions: no I/O, deterministic for a given input.
"""

from collections.abc import Mapping

from servicehealth.models.health import CheckResult, HealthStatus

ERROR_RESULTS = frozenset({CheckResult.ERROR})
DEGRADED_RESULTS = frozenset({CheckResult.DEGRADED, CheckResult.WARNING})
READY_RESULTS = frozenset({CheckResult.READY, CheckResult.NOT_CONFIGURED})


def determine_overall_status(checks: Mapping[str, CheckResult]) -> HealthStatus:
    """Determine overall health status from check results.

    Any ``error`` makes the service ``error``; otherwise any ``degraded`` or
    ``warning`` makes it ``degraded``; otherwise it is ``healthy``.

    Args:
        checks: Mapping of check name to result.

    Returns:
        Overall health status.
    """
    results = {CheckResult(result) for result in checks.values()}

    if results & ERROR_RESULTS:
        return HealthStatus.ERROR
    if results & DEGRADED_RESULTS:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


def is_ready(checks: Mapping[str, CheckResult]) -> bool:
    """True when every check is ``ready`` or ``not_configured``."""
    return all(CheckResult(result) in READY_RESULTS for result in checks.values())
