"""
Historical execution-date generation.

Enumerates every instant a recurrence rule would have fired between a
historical range start and end. The sequence is finite, monotonic and
restartable: each iteration replays the rule from its seed.
"""

from collections.abc import Iterator
from datetime import datetime
from typing import Optional

from ..utils.time import ensure_utc
from .calendar import advance, first_occurrence
from .localizer import TimeOfDayLocalizer
from .models import Cadence, RecurrenceRule, TimeOfDay


class ExecutionDates:
    """Restartable sequence of execution instants for a rule over a range."""

    def __init__(
        self,
        rule: RecurrenceRule,
        range_start: datetime,
        range_end: datetime,
        localizer: TimeOfDayLocalizer,
        max_periods: Optional[int] = None,
    ) -> None:
        self.rule = rule
        self.range_start = ensure_utc(range_start)
        self.range_end = ensure_utc(range_end)
        self.localizer = localizer
        self.max_periods = max_periods

    def __iter__(self) -> Iterator[datetime]:
        cadence = Cadence(self.rule.cadence)
        tod = TimeOfDay.parse(self.rule.time_of_day)
        monthly_day = self.rule.effective_monthly_day

        day = first_occurrence(cadence, self.rule.anchor_date, monthly_day)
        instant = self.localizer.localize(day, tod.hour, tod.minute)

        # Seed already due relative to the range start: one catch-up advance
        if instant <= self.range_start:
            day = advance(cadence, day, monthly_day)
            instant = self.localizer.localize(day, tod.hour, tod.minute)

        emitted = 0
        while instant <= self.range_end and self.rule.is_active_on(day):
            if self.max_periods is not None and emitted >= self.max_periods:
                return
            yield instant
            emitted += 1
            day = advance(cadence, day, monthly_day)
            instant = self.localizer.localize(day, tod.hour, tod.minute)


def generate_execution_dates(
    rule: RecurrenceRule,
    range_start: datetime,
    range_end: datetime,
    localizer: TimeOfDayLocalizer,
    max_periods: Optional[int] = None,
) -> list[datetime]:
    """
    Generate every execution instant of a rule within a range.

    Args:
        rule: Recurrence rule, anchored on the range start's civil date
        range_start: Historical range start; a seed at or before it is advanced once
        range_end: Inclusive range end; emission stops after it
        localizer: Reference timezone localizer
        max_periods: Optional cap on emitted instants

    Returns:
        Ascending list of UTC instants
    """
    return list(ExecutionDates(rule, range_start, range_end, localizer, max_periods))
