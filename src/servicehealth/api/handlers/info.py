"""Service information endpoint handler."""

from fastapi import APIRouter

from servicehealth.api.deps import ContextDep
from servicehealth.models.info import ServiceInfoResponse
from servicehealth.utils.clock import utc_now

router = APIRouter()


@router.get("/", response_model=ServiceInfoResponse)
async def service_info(context: ContextDep) -> ServiceInfoResponse:
    """Service information."""
    info = context.info
    return ServiceInfoResponse(
        message=f"{info.name} is running",
        version=info.version,
        timestamp=utc_now(),
        environment=info.environment,
    )
