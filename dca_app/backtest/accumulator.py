"""Cumulative position accounting for matched purchases"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from .models import BacktestStep, BacktestSummary


class BacktestAccumulator:
    """
    Folds matched (instant, price) pairs into purchase steps.

    Each step buys `contribution` worth of units at the matched price and
    carries the running units, cost and mark-to-market value.
    """

    def __init__(self, contribution: float):
        self.contribution = contribution
        self.steps: list[BacktestStep] = []
        self.cum_units = 0.0
        self.cum_cost = 0.0

    def add(self, ts: datetime, price: float) -> BacktestStep:
        """Record one purchase at the matched price."""
        units = self.contribution / price if price > 0 else 0.0
        self.cum_units += units
        self.cum_cost += self.contribution

        step = BacktestStep(
            ts=ts,
            price=price,
            units=units,
            cost=self.contribution,
            cum_units=self.cum_units,
            cum_cost=self.cum_cost,
            value=self.cum_units * price,
        )
        self.steps.append(step)
        return step

    def summary(self, final_price: Optional[float]) -> BacktestSummary:
        """
        Derive aggregate metrics after the fold.

        Args:
            final_price: Last observed price of the series; the ending
                position is marked to it

        Returns:
            BacktestSummary, all zeros when nothing was bought
        """
        if not self.steps:
            return BacktestSummary()

        end_value = self.cum_units * (final_price or 0.0)
        pnl_abs = end_value - self.cum_cost

        return BacktestSummary(
            invested=self.cum_cost,
            units=self.cum_units,
            avg_cost=self.cum_cost / self.cum_units if self.cum_units > 0 else 0.0,
            end_value=end_value,
            pnl_abs=pnl_abs,
            pnl_pct=pnl_abs / self.cum_cost * 100.0 if self.cum_cost > 0 else 0.0,
            periods=len(self.steps),
        )


def accumulate(
    matches: Iterable[tuple[datetime, float]],
    contribution: float,
    final_price: Optional[float] = None,
) -> tuple[list[BacktestStep], BacktestSummary]:
    """
    Fold matched purchases into steps and a summary.

    Args:
        matches: (instant, price) pairs in execution order
        contribution: Amount invested per period
        final_price: Mark-to-market price; defaults to the last matched price

    Returns:
        Tuple of (steps, summary)
    """
    accumulator = BacktestAccumulator(contribution)
    for ts, price in matches:
        accumulator.add(ts, price)

    if final_price is None and accumulator.steps:
        final_price = accumulator.steps[-1].price

    return accumulator.steps, accumulator.summary(final_price)
