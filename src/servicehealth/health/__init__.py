"""Dependency checks, their registry and status aggregation."""

from servicehealth.health.aggregator import determine_overall_status, is_ready
from servicehealth.health.checks import (
    CheckRegistrationError,
    DatabaseCheck,
    DependencyCheck,
    ExternalApiCheck,
    FunctionCheck,
    HealthCheck,
)
from servicehealth.health.registry import CheckRegistry, build_registry

__all__ = [
    "CheckRegistrationError",
    "CheckRegistry",
    "DatabaseCheck",
    "DependencyCheck",
    "ExternalApiCheck",
    "FunctionCheck",
    "HealthCheck",
    "build_registry",
    "determine_overall_status",
    "is_ready",
]
