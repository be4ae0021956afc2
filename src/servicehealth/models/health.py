"""Health check data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class CheckResult(str, Enum):
    """Result reported by a single dependency check."""

    READY = "ready"
    NOT_READY = "not_ready"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"
    DEGRADED = "degraded"
    WARNING = "warning"


class HealthStatus(str, Enum):
    """Overall health status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    ERROR = "error"


class ReadinessStatus(str, Enum):
    """Readiness endpoint status values."""

    READY = "ready"
    NOT_READY = "not ready"


class LivenessStatus(str, Enum):
    """Liveness endpoint status values."""

    ALIVE = "alive"


class HealthReport(BaseModel):
    """Comprehensive health check response model."""

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    status: HealthStatus
    service: str
    version: str
    timestamp: datetime
    environment: str
    uptime: float
    checks: dict[str, CheckResult]
    notes: str | None = None


class ReadinessReport(BaseModel):
    """Readiness endpoint response model."""

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    status: ReadinessStatus
    service: str
    timestamp: datetime
    checks: dict[str, CheckResult]


class LivenessReport(BaseModel):
    """Liveness endpoint response model."""

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    status: LivenessStatus = LivenessStatus.ALIVE
    service: str
    uptime: float
    timestamp: datetime
