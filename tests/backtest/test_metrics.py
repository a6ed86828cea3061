"""Tests for backtest performance statistics"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from dca_app.backtest.metrics import (
    calculate_cagr,
    calculate_max_drawdown,
    calculate_performance_metrics,
    calculate_returns,
    calculate_sharpe_ratio,
    calculate_volatility,
)
from dca_app.backtest.models import BacktestStep, PerformanceMetrics


def make_steps(values, start=datetime(2024, 1, 1, tzinfo=timezone.utc), spacing=timedelta(days=1)):
    """Steps whose only meaningful field is the position value"""
    return [
        BacktestStep(ts=start + i * spacing, price=1.0, units=0.0, cost=0.0,
                     cum_units=0.0, cum_cost=0.0, value=value)
        for i, value in enumerate(values)
    ]


class TestCAGR:
    """Test compound annual growth rate"""

    def test_two_years(self):
        assert calculate_cagr(100.0, 121.0, 2.0) == pytest.approx(0.1)

    def test_zero_years(self):
        assert calculate_cagr(100.0, 200.0, 0.0) == 0.0

    def test_zero_initial_value(self):
        assert calculate_cagr(0.0, 200.0, 1.0) == 0.0


class TestMaxDrawdown:
    """Test peak-to-trough decline"""

    def test_single_drawdown(self):
        steps = make_steps([100, 150, 90, 120, 200])
        dd_abs, dd_pct, peak_at, trough_at = calculate_max_drawdown(steps)

        assert dd_abs == pytest.approx(60.0)
        assert dd_pct == pytest.approx(40.0)
        assert peak_at == steps[1].ts
        assert trough_at == steps[2].ts

    def test_deepest_of_several(self):
        steps = make_steps([100, 80, 120, 60, 130])
        _, dd_pct, peak_at, trough_at = calculate_max_drawdown(steps)

        assert dd_pct == pytest.approx(50.0)
        assert peak_at == steps[2].ts
        assert trough_at == steps[3].ts

    def test_monotonic_increase(self):
        assert calculate_max_drawdown(make_steps([1, 2, 3])) == (0.0, 0.0, None, None)


class TestReturnsAndRisk:
    """Test return series, Sharpe ratio and volatility"""

    def test_returns(self):
        assert calculate_returns(make_steps([100, 110, 99])) == pytest.approx([0.1, -0.1])

    def test_returns_skip_zero_previous(self):
        assert calculate_returns(make_steps([0, 100, 200])) == pytest.approx([1.0])

    def test_sharpe(self):
        assert calculate_sharpe_ratio([0.1, 0.3]) == pytest.approx(2.0)

    def test_sharpe_constant_returns(self):
        assert calculate_sharpe_ratio([0.25, 0.25, 0.25]) == 0.0

    def test_sharpe_insufficient_data(self):
        assert calculate_sharpe_ratio([0.1]) == 0.0

    def test_volatility(self):
        assert calculate_volatility([0.1, 0.3]) == pytest.approx(0.1 * math.sqrt(365) * 100.0)

    def test_volatility_empty(self):
        assert calculate_volatility([]) == 0.0


class TestPerformanceMetrics:
    """Test the combined metrics"""

    def test_empty_steps(self):
        assert calculate_performance_metrics([]) == PerformanceMetrics()

    def test_growth_over_one_year(self):
        steps = make_steps([100.0, 110.0], spacing=timedelta(days=365.25))
        metrics = calculate_performance_metrics(steps)

        assert metrics.cagr_pct == pytest.approx(10.0)
        assert metrics.max_drawdown == 0.0

    def test_to_dict_formats_instants(self):
        metrics = calculate_performance_metrics(make_steps([100, 50, 75]))
        rendered = metrics.to_dict()

        assert rendered["peak_at"] == "2024-01-01T00:00:00+00:00"
        assert rendered["trough_at"] == "2024-01-02T00:00:00+00:00"
        assert rendered["max_drawdown_pct"] == pytest.approx(50.0)
