"""Tests for health check endpoint handlers."""

import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from servicehealth.config import HealthSettings, ServiceSettings, Settings
from servicehealth.health.checks import FunctionCheck
from servicehealth.health.registry import CheckRegistry
from servicehealth.main import create_app
from servicehealth.models.health import CheckResult


@pytest.fixture
def settings():
    """Settings for a named test service."""
    return Settings(
        service=ServiceSettings(name="Orders", version="3.0.0", environment="test"),
        health=HealthSettings(timeout_seconds=1.0),
    )


def client_for(settings, results: dict) -> TestClient:
    """Create a test client whose checks return fixed results."""
    registry = CheckRegistry()
    for name, result in results.items():
        registry.register(FunctionCheck(name, lambda result=result: result))
    return TestClient(create_app(settings, registry=registry), raise_server_exceptions=False)


class TestHealthEndpoint:
    """Tests for the comprehensive health endpoint."""

    def test_healthy_returns_200(self, settings):
        """Test ready and not_configured checks give healthy with 200."""
        client = client_for(
            settings,
            {"database": CheckResult.READY, "dependencies": CheckResult.NOT_CONFIGURED},
        )

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"] == {"database": "ready", "dependencies": "not_configured"}
        assert data["notes"] is None

    def test_error_returns_503(self, settings):
        """Test one error check gives error with 503."""
        client = client_for(
            settings, {"database": CheckResult.READY, "external_api": CheckResult.ERROR}
        )

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "error"

    def test_degraded_returns_200(self, settings):
        """Test degraded service still answers 200."""
        client = client_for(settings, {"external_api": CheckResult.DEGRADED})

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["notes"] == "Some services degraded"

    def test_response_structure(self, settings):
        """Test health response has every field."""
        response = client_for(settings, {}).get("/health")
        data = response.json()

        assert set(data) == {
            "status",
            "service",
            "version",
            "timestamp",
            "environment",
            "uptime",
            "checks",
            "notes",
        }
        assert data["service"] == "Orders"
        assert data["version"] == "3.0.0"
        assert data["environment"] == "test"
        assert isinstance(data["uptime"], float)

    def test_timestamp_format(self, settings):
        """Test timestamp is ISO 8601 format."""
        data = client_for(settings, {}).get("/health").json()
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))

    def test_raising_check_does_not_crash(self, settings):
        """Test a raising check is reported, not propagated."""
        registry = CheckRegistry()

        @registry.check("database")
        async def database():
            raise ConnectionError("refused")

        client = TestClient(create_app(settings, registry=registry))
        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["checks"] == {"database": "error"}

    def test_timed_out_check(self, settings):
        """Test a hanging check is reported as error within its timeout."""
        registry = CheckRegistry()

        @registry.check("slow_api", timeout_seconds=0.1)
        async def slow_api():
            await asyncio.sleep(30)

        client = TestClient(create_app(settings, registry=registry))
        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["checks"] == {"slow_api": "error"}


class TestReadinessEndpoint:
    """Tests for the readiness endpoint."""

    def test_ready(self, settings):
        """Test ready instance."""
        client = client_for(settings, {"database": CheckResult.READY})

        response = client.get("/health/readiness")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["service"] == "Orders"
        assert data["checks"] == {"database": "ready"}

    def test_not_ready_still_200(self, settings):
        """Test not ready is carried in the body, not the status code."""
        client = client_for(settings, {"database": CheckResult.ERROR})

        response = client.get("/health/readiness")

        assert response.status_code == 200
        assert response.json()["status"] == "not ready"


class TestLivenessEndpoint:
    """Tests for the liveness endpoint."""

    def test_alive(self, settings):
        """Test liveness endpoint."""
        response = client_for(settings, {}).get("/health/liveness")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "alive"
        assert data["service"] == "Orders"
        assert data["uptime"] >= 0
        assert "timestamp" in data

    def test_alive_with_failing_checks(self, settings):
        """Test liveness ignores failing and hanging checks."""
        registry = CheckRegistry()

        @registry.check("database")
        async def database():
            raise RuntimeError("down")

        @registry.check("slow_api", timeout_seconds=5.0)
        async def slow_api():
            await asyncio.sleep(30)

        client = TestClient(create_app(settings, registry=registry))
        response = client.get("/health/liveness")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestServiceInfoEndpoint:
    """Tests for the service information endpoint."""

    def test_service_info(self, settings):
        """Test root endpoint describes the service."""
        response = client_for(settings, {}).get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Orders is running"
        assert data["version"] == "3.0.0"
        assert data["environment"] == "test"
        assert "timestamp" in data
