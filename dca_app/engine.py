"""
Main engine coordinator.

Exposes the two operations consumed by the outer layers: next-run
computation for the rule-persistence layer and backtest simulation for the
reporting layer. Configuration is resolved per symbol pair and threaded
explicitly into the scheduler and backtester.
"""

from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .backtest.models import BacktestReport, BacktestRequest, PriceObservation
from .backtest.runner import BacktestService, run_backtest
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.price_sources import PriceHistoryService, PriceSource
from .errors import RuleValidationError
from .schedule.localizer import TimeOfDayLocalizer
from .schedule.models import RecurrenceRule, ScheduleDecision, TimeOfDay
from .schedule.scheduler import RecurrenceScheduler
from .utils.time import format_local_time, get_current_time
from .validation.rules import RuleValidator

logger = structlog.get_logger(__name__)

DEFAULT_PAIR = "*"


class RecurringPurchaseEngine:
    """
    Coordinator for recurring purchase scheduling and backtesting.

    Rule Store → Scheduler → next_run_at
    Price Source → Execution Dates → Matcher → Accumulator → Report
    """

    def __init__(
        self,
        config_dir: Optional[Union[str, Path]] = None,
        price_source: Optional[PriceSource] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize the engine."""
        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        self.overrides = overrides or {}
        self.price_service = PriceHistoryService(price_source)

        errors = ConfigValidator.validate_config(self.overrides)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            logger.error("Configuration override validation failed", errors=error_msgs)
            raise RuleValidationError("Invalid configuration overrides", errors=errors)

        self.config = self.config_loader.build_config(DEFAULT_PAIR, self.overrides)
        self.scheduler = RecurrenceScheduler.from_params(self.config.schedule)

        logger.info(
            "Recurring purchase engine initialized",
            timezone=self.config.schedule.timezone,
            price_source=self.price_service.adapter.name,
        )

    def validate_rule(self, rule: RecurrenceRule) -> None:
        """
        Validate a rule before it is persisted.

        Raises:
            RuleValidationError: Carrying the individual field errors
        """
        errors = RuleValidator.validate_rule(rule)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            logger.warning("Rule validation failed", errors=error_msgs)
            raise RuleValidationError("Invalid recurrence rule", errors=errors)

    def schedule(
        self,
        rule: RecurrenceRule,
        now: Optional[datetime] = None,
        last_run_at: Optional[datetime] = None,
    ) -> ScheduleDecision:
        """Full scheduling decision for a rule."""
        return self.scheduler.schedule(rule, get_current_time(now), last_run_at)

    def compute_next_run_at(
        self,
        rule: RecurrenceRule,
        now: Optional[datetime] = None,
        last_run_at: Optional[datetime] = None,
    ) -> Optional[datetime]:
        """
        Next run instant for a rule, used on create, update and fulfilment.

        Returns:
            UTC instant strictly after now, or None once the rule has ended
        """
        return self.schedule(rule, now, last_run_at).next_run_at

    def execution_time_display(
        self,
        rule: RecurrenceRule,
        on: Optional[date] = None,
        display_timezone: str = "UTC",
    ) -> str:
        """
        Rule time of day on a date rendered as HH:MM in another timezone.

        The UTC rendering of a civil time shifts across DST transitions.
        """
        tod = TimeOfDay.parse(rule.time_of_day)
        localizer = TimeOfDayLocalizer(
            self.config.schedule.timezone, self.config.schedule.fallback_utc_offset_hours
        )
        instant = localizer.localize(on or rule.anchor_date, tod.hour, tod.minute)
        return format_local_time(instant, display_timezone)

    def run_backtest(self, request: BacktestRequest) -> BacktestReport:
        """
        Validate, fetch prices and simulate a backtest request.

        Raises:
            RuleValidationError: If the request is invalid
            MissingPriceDataError: If no price data exists for the range
            PriceSourceError: If the price source fails
        """
        config = self.config_loader.build_config(request.symbol_pair, self.overrides)
        service = BacktestService(self.price_service, config)
        return service.run(request)

    def run_backtest_on_series(
        self,
        request: BacktestRequest,
        series: Sequence[PriceObservation],
    ) -> BacktestReport:
        """
        Simulate a validated request against a caller-supplied price series.

        Raises:
            RuleValidationError: If the request is invalid
            MissingPriceDataError: If the series is empty
        """
        config = self.config_loader.build_config(request.symbol_pair, self.overrides)
        BacktestService(self.price_service, config).ensure_valid(request)
        return run_backtest(request, series, config.backtest, config.schedule)
