"""
Recurrence scheduler.

Computes the next run instant of a recurrence rule relative to an injected
"now". The scheduler is a pure function over the rule: it performs no
storage I/O and never returns an instant at or before "now". Any internal
failure degrades to fixed-offset arithmetic instead of propagating.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..config.defaults import ScheduleParams
from ..errors import TemporalDataError
from ..logging.config import get_scheduler_logger, log_schedule_decision
from ..utils.time import ensure_utc
from .calendar import advance, first_occurrence, rebase
from .localizer import TimeOfDayLocalizer
from .models import Cadence, RecurrenceRule, ScheduleDecision, SchedulerState, TimeOfDay

logger = get_scheduler_logger(__name__)

# Upper bound on fallback iterations; covers a decade of daily occurrences
FALLBACK_MAX_ITERATIONS = 3700


class RecurrenceScheduler:
    """
    Next-run calculator for recurrence rules.

    Seeks from the rule's anchor: a future anchor occurrence is used as-is,
    a stale one is re-based onto the current period, and a candidate that
    is still not after the threshold is advanced once more.
    """

    def __init__(
        self,
        localizer: TimeOfDayLocalizer,
        max_catchup_advances: int = 3,
        default_time_of_day: str = "14:00",
    ) -> None:
        self.localizer = localizer
        self.max_catchup_advances = max_catchup_advances
        self.default_time_of_day = TimeOfDay.parse(default_time_of_day)

    @classmethod
    def from_params(cls, params: ScheduleParams) -> "RecurrenceScheduler":
        """Create a scheduler from schedule configuration."""
        return cls(
            localizer=TimeOfDayLocalizer(params.timezone, params.fallback_utc_offset_hours),
            max_catchup_advances=params.max_catchup_advances,
            default_time_of_day=params.default_time_of_day,
        )

    def schedule(
        self,
        rule: RecurrenceRule,
        now: datetime,
        last_run_at: Optional[datetime] = None,
    ) -> ScheduleDecision:
        """
        Decide the next run of a rule.

        Args:
            rule: Recurrence rule to schedule
            now: Injected current instant
            last_run_at: Previously persisted run; the result is strictly after it

        Returns:
            ScheduleDecision in SEEKING state with the next instant, or DONE
            when the rule's end date has been reached
        """
        threshold = ensure_utc(now)
        if last_run_at is not None:
            threshold = max(threshold, ensure_utc(last_run_at))

        try:
            decision = self._seek(rule, threshold)
        except Exception as e:
            logger.error(
                "Failed to compute next run time - using fallback",
                error=str(e),
                error_type=type(e).__name__,
                anchor_date=str(rule.anchor_date),
                time_of_day=rule.time_of_day,
            )
            decision = self._fallback(rule, threshold)

        log_schedule_decision(
            logger,
            cadence=str(getattr(rule.cadence, "value", rule.cadence)),
            state=decision.state.value,
            next_run_at=decision.next_run_at,
            advances=decision.advances,
            degraded=decision.degraded,
        )
        return decision

    def _seek(self, rule: RecurrenceRule, threshold: datetime) -> ScheduleDecision:
        cadence = Cadence(rule.cadence)
        tod = TimeOfDay.parse(rule.time_of_day)
        monthly_day = rule.effective_monthly_day

        day = first_occurrence(cadence, rule.anchor_date, monthly_day)
        if self.localizer.localize(day, tod.hour, tod.minute) <= threshold:
            reference = self.localizer.local_date(threshold)
            day = max(day, rebase(cadence, rule.anchor_date, reference, monthly_day))

        candidate = self.localizer.localize(day, tod.hour, tod.minute)
        advances = 0
        while candidate <= threshold:
            if advances >= self.max_catchup_advances:
                raise TemporalDataError(
                    "Catch-up advance limit reached",
                    start=day.isoformat(),
                    end=threshold.isoformat(),
                )
            day = advance(cadence, day, monthly_day)
            candidate = self.localizer.localize(day, tod.hour, tod.minute)
            advances += 1

        if not rule.is_active_on(day):
            return ScheduleDecision(state=SchedulerState.DONE, next_run_at=None, advances=advances)

        return ScheduleDecision(state=SchedulerState.SEEKING, next_run_at=candidate, advances=advances)

    def _fallback(self, rule: RecurrenceRule, threshold: datetime) -> ScheduleDecision:
        """Naive fixed-offset arithmetic; always yields a forward instant."""
        hour, minute = self._lenient_time(rule.time_of_day)
        fixed = self.localizer.fallback_tz

        def at(day: date) -> datetime:
            return datetime(day.year, day.month, day.day, hour, minute, tzinfo=fixed).astimezone(timezone.utc)

        try:
            cadence = Cadence(rule.cadence)
            monthly_day = rule.effective_monthly_day
            day = first_occurrence(cadence, rule.anchor_date, monthly_day)
            if at(day) <= threshold:
                reference = threshold.astimezone(fixed).date()
                day = max(day, rebase(cadence, rule.anchor_date, reference, monthly_day))

            iterations = 0
            while at(day) <= threshold and iterations < FALLBACK_MAX_ITERATIONS:
                day = advance(cadence, day, monthly_day)
                iterations += 1

            candidate = at(day)
            if rule.end_date is not None and not rule.is_active_on(day):
                return ScheduleDecision(
                    state=SchedulerState.DONE, next_run_at=None, advances=iterations, degraded=True
                )
        except Exception as e:
            logger.error("Fallback scheduling failed", error=str(e), error_type=type(e).__name__)
            candidate, iterations = threshold + timedelta(days=1), 0

        if candidate <= threshold:
            candidate = threshold + timedelta(days=1)

        return ScheduleDecision(
            state=SchedulerState.SEEKING, next_run_at=candidate, advances=iterations, degraded=True
        )

    def _lenient_time(self, value: str) -> tuple[int, int]:
        default = self.default_time_of_day
        try:
            parts = str(value).split(":")
            hour = int(parts[0])
            minute = int(parts[1]) if len(parts) > 1 else 0
        except (ValueError, IndexError):
            return default.hour, default.minute

        if not 0 <= hour <= 23 or not 0 <= minute <= 59:
            return default.hour, default.minute
        return hour, minute


def compute_next_run_at(
    rule: RecurrenceRule,
    now: datetime,
    last_run_at: Optional[datetime] = None,
    params: Optional[ScheduleParams] = None,
) -> Optional[datetime]:
    """
    Compute the next run instant of a rule.

    Used by the rule-persistence layer on create, update and fulfilment.

    Returns:
        UTC instant strictly after now (and after last_run_at when given),
        or None once the rule's end date has been reached
    """
    scheduler = RecurrenceScheduler.from_params(params or ScheduleParams())
    return scheduler.schedule(rule, now, last_run_at).next_run_at
