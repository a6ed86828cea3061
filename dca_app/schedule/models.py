"""
Recurrence rule data models.

This module defines the immutable value objects exchanged with the rule
store: cadences, civil times of day, recurrence rules and the scheduler's
decision for a single call.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from ..utils.time import parse_time_of_day

MIN_MONTHLY_DAY = 1
MAX_MONTHLY_DAY = 28     # 29-31 do not exist in every month


class Cadence(str, Enum):
    """Recurrence family of a rule."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SchedulerState(str, Enum):
    """Outcome state of a scheduling call."""
    SEEKING = "seeking"      # A future run exists
    DONE = "done"            # Rule reached its end date


@dataclass(frozen=True)
class TimeOfDay:
    """Civil wall-clock hour and minute in the reference timezone."""
    hour: int
    minute: int

    @classmethod
    def parse(cls, value: Union[str, "TimeOfDay"]) -> "TimeOfDay":
        """Parse "HH:MM"; raises ValueError on malformed input."""
        if isinstance(value, TimeOfDay):
            return value
        hour, minute = parse_time_of_day(value)
        return cls(hour=hour, minute=minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Recurring purchase schedule.

    anchor_date fixes the day of week for weekly rules and the first month
    for monthly rules. time_of_day is civil time in the reference timezone,
    kept as the raw "HH:MM" string supplied by the rule store. end_date is
    exclusive: no occurrence on or after it fires.
    """
    cadence: Cadence
    anchor_date: date
    time_of_day: str = "14:00"
    monthly_day: Optional[int] = None
    end_date: Optional[date] = None

    @classmethod
    def create(
        cls,
        cadence: Union[Cadence, str],
        anchor: Union[date, datetime, str],
        time_of_day: str = "14:00",
        monthly_day: Optional[int] = None,
        end_date: Optional[Union[date, datetime, str]] = None,
    ) -> "RecurrenceRule":
        """Build a rule from loosely typed rule-store fields."""
        cadence = Cadence(cadence)
        if cadence is not Cadence.MONTHLY:
            monthly_day = None
        elif monthly_day is None:
            monthly_day = MIN_MONTHLY_DAY

        return cls(
            cadence=cadence,
            anchor_date=_to_date(anchor),
            time_of_day=str(time_of_day),
            monthly_day=monthly_day,
            end_date=_to_date(end_date) if end_date is not None else None,
        )

    @property
    def effective_monthly_day(self) -> int:
        """Day of month for monthly rules, clamped to [1, 28]."""
        if self.monthly_day is None:
            return MIN_MONTHLY_DAY
        return max(MIN_MONTHLY_DAY, min(MAX_MONTHLY_DAY, int(self.monthly_day)))

    def is_active_on(self, day: date) -> bool:
        """Whether an occurrence on this civil date precedes the end date."""
        return self.end_date is None or day < self.end_date

    def with_anchor(self, anchor: date) -> "RecurrenceRule":
        """Copy of the rule re-anchored on another date."""
        return replace(self, anchor_date=anchor)


@dataclass(frozen=True)
class ScheduleDecision:
    """Result of one scheduler call."""
    state: SchedulerState
    next_run_at: Optional[datetime]
    advances: int = 0
    degraded: bool = False

    @property
    def is_done(self) -> bool:
        return self.state is SchedulerState.DONE


def _to_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
