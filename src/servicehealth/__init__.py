"""Service health reporting and structured error handling for FastAPI services."""

__version__ = "1.0.0"
