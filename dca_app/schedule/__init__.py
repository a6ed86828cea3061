"""
Recurrence scheduling module.

Calendar advance, civil time-of-day localization, next-run computation and
historical execution-date generation for recurring purchase rules.
"""

from .calendar import advance
from .generator import generate_execution_dates
from .localizer import TimeOfDayLocalizer, localize
from .models import Cadence, RecurrenceRule, ScheduleDecision, SchedulerState, TimeOfDay
from .scheduler import RecurrenceScheduler, compute_next_run_at

__all__ = [
    "Cadence",
    "RecurrenceRule",
    "RecurrenceScheduler",
    "ScheduleDecision",
    "SchedulerState",
    "TimeOfDay",
    "TimeOfDayLocalizer",
    "advance",
    "compute_next_run_at",
    "generate_execution_dates",
    "localize",
]
