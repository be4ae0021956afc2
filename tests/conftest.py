"""Shared test fixtures."""

import os

import pytest

from servicehealth.config import get_settings

SERVICE_ENV_VARS = ("SERVICE_NAME", "SERVICE_VERSION", "ENVIRONMENT", "PORT")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the caller's environment out of Settings."""
    for var in SERVICE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    for var in list(os.environ):
        if var.startswith("SERVICEHEALTH_"):
            monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
