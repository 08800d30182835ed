"""Timestamp helpers shared by the NAV services."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Naive UTC timestamp, as stored in the database."""
    return datetime.now(UTC).replace(tzinfo=None)
