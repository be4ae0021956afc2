"""Service information models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ServiceInfo(BaseModel):
    """Service identity captured once at startup."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    environment: str


class ServiceInfoResponse(BaseModel):
    """Response for the service information endpoint."""

    message: str
    version: str
    timestamp: datetime
    environment: str
