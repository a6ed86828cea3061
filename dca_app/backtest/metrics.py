"""Performance statistics over backtest step values"""

import math
from datetime import datetime
from typing import Optional

from .models import BacktestStep, PerformanceMetrics

DAYS_PER_YEAR = 365.25
PERIODS_PER_YEAR = 365


def calculate_cagr(initial_value: float, final_value: float, years: float) -> float:
    """
    Calculate compound annual growth rate

    CAGR = (final / initial) ^ (1 / years) - 1

    Returns:
        CAGR as a fraction, 0.0 when years or initial value are not positive
    """
    if years <= 0 or initial_value <= 0 or final_value < 0:
        return 0.0

    return (final_value / initial_value) ** (1.0 / years) - 1.0


def calculate_max_drawdown(
    steps: list[BacktestStep],
) -> tuple[float, float, Optional[datetime], Optional[datetime]]:
    """
    Calculate the largest peak-to-trough decline of the position value

    Returns:
        Tuple of (drawdown amount, drawdown percent, peak instant, trough instant)
    """
    peak_value = 0.0
    peak_at: Optional[datetime] = None
    max_dd_pct = 0.0
    max_dd_abs = 0.0
    dd_peak_at: Optional[datetime] = None
    dd_trough_at: Optional[datetime] = None

    for step in steps:
        if step.value > peak_value:
            peak_value = step.value
            peak_at = step.ts
            continue

        if peak_value <= 0:
            continue

        drawdown = (peak_value - step.value) / peak_value
        if drawdown > max_dd_pct:
            max_dd_pct = drawdown
            max_dd_abs = peak_value - step.value
            dd_peak_at = peak_at
            dd_trough_at = step.ts

    return max_dd_abs, max_dd_pct * 100.0, dd_peak_at, dd_trough_at


def calculate_returns(steps: list[BacktestStep]) -> list[float]:
    """Step-to-step relative changes of the position value"""
    returns = []
    for previous, current in zip(steps, steps[1:]):
        if previous.value > 0:
            returns.append((current.value - previous.value) / previous.value)
    return returns


def _std_dev(returns: list[float]) -> float:
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    return math.sqrt(variance)


def calculate_sharpe_ratio(returns: list[float], risk_free_rate: float = 0.0) -> float:
    """
    Calculate a per-period Sharpe ratio

    Returns:
        (mean - risk_free) / std, 0.0 with fewer than two returns or zero deviation
    """
    if len(returns) < 2:
        return 0.0

    std = _std_dev(returns)
    if std <= 0:
        return 0.0

    return (sum(returns) / len(returns) - risk_free_rate) / std


def calculate_volatility(returns: list[float]) -> float:
    """Annualized volatility percentage, sqrt(365) scaling"""
    if not returns:
        return 0.0

    return _std_dev(returns) * math.sqrt(PERIODS_PER_YEAR) * 100.0


def calculate_performance_metrics(steps: list[BacktestStep]) -> PerformanceMetrics:
    """Compute all performance statistics for a step list"""
    if not steps:
        return PerformanceMetrics()

    first, last = steps[0], steps[-1]
    years = (last.ts - first.ts).total_seconds() / (DAYS_PER_YEAR * 86400.0)
    returns = calculate_returns(steps)
    dd_abs, dd_pct, peak_at, trough_at = calculate_max_drawdown(steps)

    return PerformanceMetrics(
        cagr_pct=calculate_cagr(first.value, last.value, years) * 100.0,
        max_drawdown=dd_abs,
        max_drawdown_pct=dd_pct,
        peak_at=peak_at,
        trough_at=trough_at,
        sharpe_ratio=calculate_sharpe_ratio(returns),
        volatility_pct=calculate_volatility(returns),
    )
