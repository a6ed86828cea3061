"""
Time semantics utilities for instants and civil times of day.

This module centralizes the small pieces of time handling that both the
scheduler and the backtester rely on: injectable clock reads, UTC
coercion, "HH:MM" parsing and display formatting.
"""

import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TIME_OF_DAY_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def get_current_time(now: Optional[datetime] = None) -> datetime:
    """
    Get the reference "now", preferring an injected clock value.

    Args:
        now: Optional caller-supplied instant

    Returns:
        UTC datetime, falling back to wall-clock time if none supplied
    """
    if now is not None:
        return ensure_utc(now)

    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """
    Coerce a datetime to an aware UTC datetime.

    Naive values are interpreted as already being UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)

    return ts.astimezone(timezone.utc)


def parse_time_of_day(value: str) -> tuple[int, int]:
    """
    Parse an "HH:MM" civil time of day.

    Args:
        value: Time string such as "14:00" or "9:30"

    Returns:
        Tuple of (hour, minute)

    Raises:
        ValueError: If the string is not a valid 24-hour HH:MM time
    """
    match = TIME_OF_DAY_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid time of day: {value!r}")

    return int(match.group(1)), int(match.group(2))


def format_local_time(instant: datetime, timezone_name: str) -> str:
    """
    Format an instant as a civil "HH:MM" in the named timezone for display.

    Falls back to the UTC wall-clock time if the zone cannot be loaded.
    """
    utc_instant = ensure_utc(instant)
    try:
        local = utc_instant.astimezone(ZoneInfo(timezone_name))
    except (ZoneInfoNotFoundError, ValueError):
        local = utc_instant

    return local.strftime("%H:%M")


def format_instant(instant: datetime) -> str:
    """Format an instant as an ISO8601 UTC string."""
    return ensure_utc(instant).isoformat()


def hours_between(earlier: datetime, later: datetime) -> float:
    """Elapsed hours from earlier to later (negative if reversed)."""
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 3600.0
