"""
Error classification system for scheduling and backtesting.

This module provides a structured exception hierarchy for the input,
collaborator and degradation failures the engine distinguishes.
"""

from .data_quality import (
    DataQualityError,
    TemporalDataError,
    MissingDataError,
    MissingPriceDataError,
    MalformedDataError,
    RuleValidationError,
)
from .system_failures import (
    SystemFailureError,
    PriceSourceError,
)
from .recovery import (
    GracefulDegradationError,
    TimezoneUnavailableError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "TemporalDataError",
    "MissingDataError",
    "MissingPriceDataError",
    "MalformedDataError",
    "RuleValidationError",
    # System Failures
    "SystemFailureError",
    "PriceSourceError",
    # Recovery Categories
    "GracefulDegradationError",
    "TimezoneUnavailableError",
]
