"""
Calendar advance arithmetic for recurrence cadences.

Pure date arithmetic with no timezone awareness. Monthly days are capped at
28, so moving to the same day of another month never needs clamping.
"""

from datetime import date, timedelta
from typing import Optional

from .models import MAX_MONTHLY_DAY, MIN_MONTHLY_DAY, Cadence


def _monthly_day(from_date: date, monthly_day: Optional[int]) -> int:
    day = from_date.day if monthly_day is None else monthly_day
    return max(MIN_MONTHLY_DAY, min(MAX_MONTHLY_DAY, day))


def advance(cadence: Cadence, from_date: date, monthly_day: Optional[int] = None) -> date:
    """
    Return the next calendar date of a cadence after from_date.

    Args:
        cadence: Recurrence family
        from_date: Date of the current occurrence
        monthly_day: Target day of month for monthly cadence; defaults to
            from_date's day, clamped to [1, 28]

    Returns:
        Next occurrence date
    """
    if cadence is Cadence.DAILY:
        return from_date + timedelta(days=1)
    elif cadence is Cadence.WEEKLY:
        return from_date + timedelta(days=7)
    elif cadence is Cadence.MONTHLY:
        year, month = from_date.year, from_date.month + 1
        if month > 12:
            year, month = year + 1, 1
        return date(year, month, _monthly_day(from_date, monthly_day))

    raise ValueError(f"Unsupported cadence: {cadence!r}")


def first_occurrence(cadence: Cadence, anchor: date, monthly_day: Optional[int] = None) -> date:
    """
    First occurrence date of a rule anchored on anchor.

    Monthly rules fire on monthly_day of the anchor's month, which may
    precede the anchor itself.
    """
    if cadence is Cadence.DAILY or cadence is Cadence.WEEKLY:
        return anchor
    elif cadence is Cadence.MONTHLY:
        return anchor.replace(day=_monthly_day(anchor, monthly_day))

    raise ValueError(f"Unsupported cadence: {cadence!r}")


def rebase(cadence: Cadence, anchor: date, reference: date, monthly_day: Optional[int] = None) -> date:
    """
    Move a stale anchor onto the reference date's period in O(1).

    Daily rules land on the reference date, weekly rules on the first date
    on or after it sharing the anchor's weekday, and monthly rules on
    monthly_day of the reference month.
    """
    if cadence is Cadence.DAILY:
        return reference
    elif cadence is Cadence.WEEKLY:
        return reference + timedelta(days=(anchor.weekday() - reference.weekday()) % 7)
    elif cadence is Cadence.MONTHLY:
        return reference.replace(day=_monthly_day(anchor, monthly_day))

    raise ValueError(f"Unsupported cadence: {cadence!r}")
