"""Health, readiness and liveness report construction."""

import logging

from servicehealth.context import ServiceContext
from servicehealth.health.aggregator import determine_overall_status, is_ready
from servicehealth.health.runner import run_checks
from servicehealth.models.health import (
    HealthReport,
    HealthStatus,
    LivenessReport,
    ReadinessReport,
    ReadinessStatus,
)
from servicehealth.utils.clock import utc_now

logger = logging.getLogger(__name__)

DEGRADED_NOTE = "Some services degraded"
FAILED_NOTE = "Health check failed"


def health_status_code(report: HealthReport) -> int:
    """HTTP status for a comprehensive health report: 503 on error, else 200."""
    return 503 if report.status == HealthStatus.ERROR else 200


class HealthResponder:
    """Builds the three health report shapes for a service."""

    def __init__(self, context: ServiceContext):
        self.context = context

    async def comprehensive_health(self) -> HealthReport:
        """Run every registered check concurrently and aggregate the results.

        Check failures are recorded per check by the runner. Anything else
        going wrong while building the report yields an ``error`` report
        instead of propagating.
        """
        info = self.context.info

        try:
            checks = await run_checks(
                self.context.registry.all_checks(), self.context.registry
            )
            status = determine_overall_status(checks)
        except Exception:
            logger.exception("Health check failed")
            return HealthReport(
                status=HealthStatus.ERROR,
                service=info.name,
                version=info.version,
                timestamp=utc_now(),
                environment=info.environment,
                uptime=self.context.uptime(),
                checks={},
                notes=FAILED_NOTE,
            )

        if status != HealthStatus.HEALTHY:
            logger.warning(
                f"Service health is {status.value}",
                extra={"service": info.name},
            )

        return HealthReport(
            status=status,
            service=info.name,
            version=info.version,
            timestamp=utc_now(),
            environment=info.environment,
            uptime=self.context.uptime(),
            checks=checks,
            notes=DEGRADED_NOTE if status == HealthStatus.DEGRADED else None,
        )

    async def readiness(self) -> ReadinessReport:
        """Run the readiness checks.

        Readiness is carried in the body only; callers always answer 200.
        """
        try:
            checks = await run_checks(
                self.context.registry.readiness_checks(), self.context.registry
            )
            status = ReadinessStatus.READY if is_ready(checks) else ReadinessStatus.NOT_READY
        except Exception:
            logger.exception("Readiness check failed")
            checks = {}
            status = ReadinessStatus.NOT_READY

        return ReadinessReport(
            status=status,
            service=self.context.info.name,
            timestamp=utc_now(),
            checks=checks,
        )

    def liveness(self) -> LivenessReport:
        """Report that the process is running. Never runs checks."""
        return LivenessReport(
            service=self.context.info.name,
            uptime=self.context.uptime(),
            timestamp=utc_now(),
        )
