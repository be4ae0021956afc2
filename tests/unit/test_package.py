"""Test package initialization and imports."""

import sys


def test_package_version():
    """Verify package version is accessible."""
    from servicehealth import __version__

    assert __version__ == "1.0.0"


def test_python_version():
    """Verify Python version meets minimum requirement (>=3.11)."""
    assert sys.version_info >= (3, 11), "Python 3.11+ is required"


def test_subpackages_importable():
    """Verify all subpackages are importable."""
    import servicehealth.api
    import servicehealth.api.handlers
    import servicehealth.health
    import servicehealth.middleware
    import servicehealth.models
    import servicehealth.utils

    assert servicehealth.api is not None
    assert servicehealth.api.handlers is not None
    assert servicehealth.health is not None
    assert servicehealth.middleware is not None
    assert servicehealth.models is not None
    assert servicehealth.utils is not None


def test_health_exports():
    """Verify the health package exposes the registry and check types."""
    from servicehealth.health import CheckRegistry, FunctionCheck, determine_overall_status

    assert callable(determine_overall_status)
    assert CheckRegistry is not None
    assert FunctionCheck is not None
