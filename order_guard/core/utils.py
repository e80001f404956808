"""
Utility functions for the application.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Naive UTC timestamp, the form every TIMESTAMP column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise an incoming datetime to naive UTC.

    Aware values are converted to UTC first; naive values are assumed to
    already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
