"""
UTC timestamps

Columns are ``timestamp without time zone`` holding UTC, so stored values
are naive UTC datetimes.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
