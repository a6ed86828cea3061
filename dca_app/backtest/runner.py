"""
Backtest orchestration.

Replays a recurrence rule over a historical range: the execution-date
generator produces target instants, the snap-forward matcher pairs each
with a price observation, and the accumulator folds the matches into
steps, a summary and performance metrics.
"""

from collections.abc import Sequence
from datetime import time, timedelta
from typing import Optional

from ..config.defaults import BacktestParams, DefaultConfig, ScheduleParams, get_default_config
from ..config.validation import ValidationError
from ..data.price_sources import PriceHistoryService
from ..errors import MissingPriceDataError, RuleValidationError
from ..logging.config import get_backtest_logger, log_missed_execution
from ..schedule.generator import ExecutionDates
from ..schedule.localizer import TimeOfDayLocalizer
from ..schedule.models import RecurrenceRule
from ..utils.time import ensure_utc
from ..validation.rules import RuleValidator
from .accumulator import BacktestAccumulator
from .matcher import SnapForwardMatcher
from .metrics import calculate_performance_metrics
from .models import BacktestReport, BacktestRequest, PriceObservation

logger = get_backtest_logger(__name__)


def build_rule(request: BacktestRequest, localizer: TimeOfDayLocalizer) -> RecurrenceRule:
    """
    Recurrence rule anchored on the calendar date of the request start.

    A start at midnight UTC is a plain calendar date and anchors on that
    date. A start carrying a time of day anchors on its civil date in the
    reference timezone.
    """
    start = ensure_utc(request.start)
    if start.time() == time(0, 0):
        anchor = start.date()
    else:
        anchor = localizer.local_date(start)

    return RecurrenceRule.create(
        cadence=request.cadence,
        anchor=anchor,
        time_of_day=request.time_of_day,
        monthly_day=request.monthly_day,
    )


def run_backtest(
    request: BacktestRequest,
    series: Optional[Sequence[PriceObservation]],
    params: Optional[BacktestParams] = None,
    schedule_params: Optional[ScheduleParams] = None,
) -> BacktestReport:
    """
    Simulate a recurring purchase rule against a price series.

    Args:
        request: Rule-like simulation input
        series: Price observations for the request's pair; treated as an
            immutable snapshot
        params: Backtest parameters (tolerance, period cap)
        schedule_params: Reference timezone parameters

    Returns:
        BacktestReport with steps, summary and metrics

    Raises:
        MissingPriceDataError: If the series is absent or empty
    """
    params = params or BacktestParams()
    schedule_params = schedule_params or ScheduleParams()

    if not series:
        raise MissingPriceDataError(
            f"No price data available for {request.symbol_pair}",
            symbol_pair=request.symbol_pair,
        )

    localizer = TimeOfDayLocalizer(schedule_params.timezone, schedule_params.fallback_utc_offset_hours)
    rule = build_rule(request, localizer)
    targets = ExecutionDates(rule, request.start, request.end, localizer, params.max_periods)
    matcher = SnapForwardMatcher(series, timedelta(hours=params.tolerance_hours))
    accumulator = BacktestAccumulator(request.amount)
    missed = []

    for target in targets:
        observation = matcher.match(target)
        if observation is None:
            missed.append(target)
            last = matcher.last_observation
            log_missed_execution(logger, request.symbol_pair, target, last.ts if last else None)
            continue
        accumulator.add(target, observation.price)

    final_price = matcher.last_observation.price if matcher.last_observation else None
    summary = accumulator.summary(final_price)
    report = BacktestReport(
        request=request,
        steps=list(accumulator.steps),
        summary=summary,
        metrics=calculate_performance_metrics(accumulator.steps),
        missed=missed,
    )

    logger.info(
        "Backtest calculation completed",
        symbol_pair=request.symbol_pair,
        periods=summary.periods,
        missed=len(missed),
        invested=summary.invested,
        end_value=summary.end_value,
        pnl_pct=round(summary.pnl_pct, 2),
    )
    return report


class BacktestService:
    """Validates a request, fetches its price series and runs the simulation."""

    def __init__(
        self,
        price_service: Optional[PriceHistoryService] = None,
        config: Optional[DefaultConfig] = None,
    ) -> None:
        self.price_service = price_service or PriceHistoryService()
        self.config = config or get_default_config()

    def validate(self, request: BacktestRequest) -> list[ValidationError]:
        return RuleValidator.validate_backtest_request(request, self.config.limits, self.config.backtest)

    def ensure_valid(self, request: BacktestRequest) -> None:
        """
        Reject an invalid request before any price data is touched.

        Raises:
            RuleValidationError: Carrying the individual field errors
        """
        errors = self.validate(request)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            logger.warning("Backtest request validation failed", errors=error_msgs)
            raise RuleValidationError("Invalid backtest request", errors=errors)

    def run(self, request: BacktestRequest) -> BacktestReport:
        """
        Run one backtest request end to end.

        Raises:
            RuleValidationError: If the request fails validation
            MissingPriceDataError: If the source has no prices for the range
            PriceSourceError: If the price source fails
        """
        self.ensure_valid(request)

        series = self.price_service.get_observations(
            request.symbol_pair, request.start, request.end, request.granularity
        )
        return run_backtest(request, series, self.config.backtest, self.config.schedule)
