"""Backtest simulation: price matching, position accumulation and metrics"""

from .accumulator import BacktestAccumulator, accumulate
from .matcher import DEFAULT_TOLERANCE, SnapForwardMatcher, match_price
from .metrics import calculate_performance_metrics
from .models import (
    BacktestReport,
    BacktestRequest,
    BacktestStep,
    BacktestSummary,
    PerformanceMetrics,
    PriceObservation,
)

__all__ = [
    "BacktestAccumulator",
    "BacktestReport",
    "BacktestRequest",
    "BacktestStep",
    "BacktestSummary",
    "DEFAULT_TOLERANCE",
    "PerformanceMetrics",
    "PriceObservation",
    "SnapForwardMatcher",
    "accumulate",
    "calculate_performance_metrics",
    "match_price",
]
