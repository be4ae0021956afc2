"""Health check endpoint handlers."""

from fastapi import APIRouter, Response

from servicehealth.api.deps import ResponderDep
from servicehealth.health.responder import health_status_code
from servicehealth.models.health import HealthReport, LivenessReport, ReadinessReport

router = APIRouter()


@router.get("/health", response_model=HealthReport)
async def health_check(responder: ResponderDep, response: Response) -> HealthReport:
    """Comprehensive health check.

    Runs every registered dependency check.
    - HTTP 200: Service is healthy or degraded
    - HTTP 503: Service is in error
    """
    report = await responder.comprehensive_health()
    response.status_code = health_status_code(report)
    return report


@router.get("/health/readiness", response_model=ReadinessReport)
async def readiness_check(responder: ResponderDep) -> ReadinessReport:
    """Service readiness endpoint.

    Always HTTP 200; the body's status says whether the instance should
    receive traffic.
    """
    return await responder.readiness()


@router.get("/health/liveness", response_model=LivenessReport)
async def liveness_check(responder: ResponderDep) -> LivenessReport:
    """Service liveness endpoint.

    Reports that the process is running. No dependency checks.
    """
    return responder.liveness()
