"""Time Utilities for UTC management"""

from datetime import datetime, timezone


def get_utc_now() -> datetime:
    """
    Returns a naive UTC datetime.
    Matches the DB schema (TIMESTAMP WITHOUT TIME ZONE).
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
