"""
Data quality error classifications for rules and price data.

These exceptions categorize the input problems that can reach the scheduler
or the backtester: malformed rule fields, inverted ranges and missing price
series.
"""

from typing import Any, Optional


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class TemporalDataError(DataQualityError):
    """Inverted or oversized time ranges."""

    def __init__(self, message: str, start: Optional[str] = None,
                 end: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.start = start
        self.end = end


class MissingDataError(DataQualityError):
    """Required data is completely missing."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class MissingPriceDataError(MissingDataError):
    """No price observations available for a backtest request."""

    def __init__(self, message: str, symbol_pair: Optional[str] = None, **kwargs):
        super().__init__(message, data_type="price_series", **kwargs)
        self.symbol_pair = symbol_pair
        # A backtest cannot proceed without prices
        self.recoverable = False


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class RuleValidationError(DataQualityError):
    """A recurrence rule or backtest request failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
        self.recoverable = False
