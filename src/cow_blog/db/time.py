"""Timestamps for rows and for the API responses that carry them.

SQLite hands ``DateTime(timezone=True)`` columns back as naive values, while
rows created in the running session keep the aware value they were built with.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
