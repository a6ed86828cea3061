"""Recurrence rule and backtest request validation."""

import re
from datetime import date, datetime
from typing import Any, Optional

from ..backtest.models import BacktestRequest
from ..config.defaults import BacktestParams, LimitsParams
from ..config.validation import ValidationError
from ..schedule.models import MAX_MONTHLY_DAY, MIN_MONTHLY_DAY, Cadence, RecurrenceRule
from ..utils.time import TIME_OF_DAY_PATTERN, ensure_utc

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9]+$")
MAX_SYMBOL_LENGTH = 10


class RuleValidator:
    """Validates rule-store and backtest inputs before they reach the core."""

    @staticmethod
    def validate_symbol(field: str, value: Any) -> list[ValidationError]:
        if not isinstance(value, str) or not value:
            return [ValidationError(field=field, message="Is required", value=value)]
        if len(value) > MAX_SYMBOL_LENGTH:
            return [ValidationError(field=field, message="Must be at most 10 characters", value=value)]
        if not SYMBOL_PATTERN.match(value):
            return [ValidationError(field=field, message="Must be uppercase alphanumeric", value=value)]
        return []

    @staticmethod
    def validate_pair(base_symbol: str, quote_symbol: str, limits: LimitsParams) -> list[ValidationError]:
        pair = f"{base_symbol}-{quote_symbol}"
        if limits.supported_pairs and pair not in limits.supported_pairs:
            return [ValidationError(field="symbol_pair", message="Unsupported symbol pair", value=pair)]
        return []

    @staticmethod
    def validate_amount(value: Any, limits: LimitsParams) -> list[ValidationError]:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return [ValidationError(field="amount", message="Must be a number", value=value)]
        if not limits.min_amount <= value <= limits.max_amount:
            return [ValidationError(
                field="amount",
                message=f"Must be between {limits.min_amount:g} and {limits.max_amount:g}",
                value=value
            )]
        return []

    @staticmethod
    def validate_cadence(value: Any) -> list[ValidationError]:
        try:
            Cadence(value)
        except ValueError:
            return [ValidationError(field="cadence", message="Must be daily, weekly, or monthly", value=value)]
        return []

    @staticmethod
    def validate_time_of_day(value: Any) -> list[ValidationError]:
        if not isinstance(value, str) or not TIME_OF_DAY_PATTERN.match(value):
            return [ValidationError(field="time_of_day", message="Must be in HH:MM format", value=value)]
        return []

    @staticmethod
    def validate_monthly_day(value: Optional[int]) -> list[ValidationError]:
        if value is None:
            return []
        if not isinstance(value, int) or isinstance(value, bool) or not MIN_MONTHLY_DAY <= value <= MAX_MONTHLY_DAY:
            return [ValidationError(field="monthly_day", message="Must be between 1 and 28", value=value)]
        return []

    @staticmethod
    def validate_range(
        start: Any,
        end: Any,
        max_range_days: Optional[int] = None,
    ) -> list[ValidationError]:
        """End must be after start; optionally bound the range length."""
        if end is None:
            return []
        if isinstance(start, datetime) and isinstance(end, datetime):
            start, end = ensure_utc(start), ensure_utc(end)
        elif isinstance(start, datetime) or isinstance(end, datetime):
            start = start.date() if isinstance(start, datetime) else start
            end = end.date() if isinstance(end, datetime) else end

        if not isinstance(start, date) or not isinstance(end, date):
            return [ValidationError(field="end", message="Must be a date", value=end)]
        if end <= start:
            return [ValidationError(field="end", message="End date must be after start date", value=str(end))]

        if max_range_days is not None:
            span = end - start
            if span.days > max_range_days:
                return [ValidationError(
                    field="end",
                    message=f"Range must not exceed {max_range_days} days",
                    value=str(end)
                )]
        return []

    @staticmethod
    def validate_rule(rule: RecurrenceRule) -> list[ValidationError]:
        """Validate the scheduling fields of a recurrence rule."""
        errors = []
        errors.extend(RuleValidator.validate_cadence(rule.cadence))
        errors.extend(RuleValidator.validate_time_of_day(rule.time_of_day))
        errors.extend(RuleValidator.validate_monthly_day(rule.monthly_day))
        errors.extend(RuleValidator.validate_range(rule.anchor_date, rule.end_date))
        return errors

    @staticmethod
    def validate_backtest_request(
        request: BacktestRequest,
        limits: LimitsParams,
        params: BacktestParams,
    ) -> list[ValidationError]:
        """Validate a backtest request against limits and range caps."""
        errors = []
        errors.extend(RuleValidator.validate_symbol("base_symbol", request.base_symbol))
        errors.extend(RuleValidator.validate_symbol("quote_symbol", request.quote_symbol))
        if not errors:
            errors.extend(RuleValidator.validate_pair(request.base_symbol, request.quote_symbol, limits))
        errors.extend(RuleValidator.validate_amount(request.amount, limits))
        errors.extend(RuleValidator.validate_cadence(request.cadence))
        errors.extend(RuleValidator.validate_time_of_day(request.time_of_day))
        errors.extend(RuleValidator.validate_monthly_day(request.monthly_day))
        errors.extend(RuleValidator.validate_range(request.start, request.end, params.max_range_days))
        return errors
