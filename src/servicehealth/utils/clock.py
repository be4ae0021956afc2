"""Timestamp helpers shared by health and error responses."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime.

    Pydantic serializes these as ISO-8601 strings ending in ``Z``.
    """
    return datetime.now(timezone.utc)
