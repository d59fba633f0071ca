"""
Datetime utility functions.
"""

import re
from datetime import datetime, timedelta
from typing import Optional
import pytz

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes (SQLite returns timestamps without tzinfo).

    Aware datetimes are converted to UTC; None passes through.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def parse_duration(value: str) -> timedelta:
    """
    Parse a token lifetime string into a timedelta.

    Accepts a bare number of seconds or a number followed by a unit:
    s (seconds), m (minutes), h (hours), d (days).

    Examples:
        >>> parse_duration("15m")
        datetime.timedelta(seconds=900)
        >>> parse_duration("7d")
        datetime.timedelta(days=7)
        >>> parse_duration("3600")
        datetime.timedelta(seconds=3600)

    Raises:
        ValueError: If the string is not a valid duration
    """
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for API responses."""
    return value.isoformat() if value else None
