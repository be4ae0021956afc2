"""Error response data models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ErrorReport(BaseModel):
    """Structured error body returned for every failed request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error: str
    message: str
    timestamp: datetime
    request_id: str | None = Field(default=None, alias="requestId")


class NotFoundReport(ErrorReport):
    """Error body for unmatched routes, listing the endpoints that do exist."""

    available_endpoints: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        alias="availableEndpoints",
    )
