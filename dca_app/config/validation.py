"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..utils.time import TIME_OF_DAY_PATTERN


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration or request validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_schedule_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate scheduling parameters."""
        errors = []

        # Validate timezone
        if "timezone" in params:
            value = params["timezone"]
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError, TypeError):
                errors.append(ValidationError(
                    field="timezone",
                    message="Must be a known IANA timezone name",
                    value=value
                ))

        # Validate fallback_utc_offset_hours
        if "fallback_utc_offset_hours" in params:
            value = params["fallback_utc_offset_hours"]
            if not isinstance(value, int) or isinstance(value, bool) or not -23 <= value <= 23:
                errors.append(ValidationError(
                    field="fallback_utc_offset_hours",
                    message="Must be an integer between -23 and 23",
                    value=value
                ))

        # Validate default_time_of_day
        if "default_time_of_day" in params:
            value = params["default_time_of_day"]
            if not isinstance(value, str) or not TIME_OF_DAY_PATTERN.match(value):
                errors.append(ValidationError(
                    field="default_time_of_day",
                    message="Must be a HH:MM time",
                    value=value
                ))

        # Validate max_catchup_advances
        if "max_catchup_advances" in params:
            value = params["max_catchup_advances"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="max_catchup_advances",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_backtest_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate backtest parameters."""
        errors = []

        for name in ("tolerance_hours", "max_range_days", "max_periods"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        # Validate default_granularity
        if "default_granularity" in params:
            value = params["default_granularity"]
            if value not in ("1d", "4h", "1h"):
                errors.append(ValidationError(
                    field="default_granularity",
                    message="Must be one of 1d, 4h, 1h",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_limits_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate request limit parameters."""
        errors = []

        min_amount = params.get("min_amount")
        max_amount = params.get("max_amount")

        if min_amount is not None and (not _is_number(min_amount) or min_amount <= 0):
            errors.append(ValidationError(
                field="min_amount",
                message="Must be a positive number",
                value=min_amount
            ))

        if max_amount is not None and (not _is_number(max_amount) or max_amount <= 0):
            errors.append(ValidationError(
                field="max_amount",
                message="Must be a positive number",
                value=max_amount
            ))
        elif _is_number(min_amount) and _is_number(max_amount) and max_amount < min_amount:
            errors.append(ValidationError(
                field="max_amount",
                message="Must not be below min_amount",
                value=max_amount
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "schedule" in config:
            errors.extend(ConfigValidator.validate_schedule_params(config["schedule"]))

        if "backtest" in config:
            errors.extend(ConfigValidator.validate_backtest_params(config["backtest"]))

        if "limits" in config:
            errors.extend(ConfigValidator.validate_limits_params(config["limits"]))

        return errors
