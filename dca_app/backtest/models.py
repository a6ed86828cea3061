"""
Backtest data models.

Immutable value objects created and discarded within one backtest run:
price observations, matched purchase steps, the aggregate summary and the
report handed to the reporting layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..schedule.models import Cadence
from ..utils.time import format_instant


@dataclass(frozen=True)
class PriceObservation:
    """Closing price observed at an instant."""
    ts: datetime        # UTC observation timestamp
    price: float        # Closing price


@dataclass(frozen=True)
class BacktestRequest:
    """Rule-like simulation input."""
    base_symbol: str
    quote_symbol: str
    amount: float                   # Contribution per period, in quote currency
    cadence: Cadence
    start: datetime
    end: datetime
    time_of_day: str = "14:00"      # Civil HH:MM in the reference timezone
    monthly_day: Optional[int] = None
    granularity: str = "1d"

    @property
    def symbol_pair(self) -> str:
        return f"{self.base_symbol}-{self.quote_symbol}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_symbol": self.base_symbol,
            "quote_symbol": self.quote_symbol,
            "amount": self.amount,
            "cadence": Cadence(self.cadence).value,
            "start": format_instant(self.start),
            "end": format_instant(self.end),
            "time_of_day": self.time_of_day,
            "monthly_day": self.monthly_day,
            "granularity": self.granularity,
        }


@dataclass(frozen=True)
class BacktestStep:
    """One matched purchase and the running position after it."""
    ts: datetime            # Scheduled execution instant
    price: float            # Matched observation price
    units: float            # contribution / price
    cost: float             # contribution
    cum_units: float
    cum_cost: float
    value: float            # cum_units * price

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": format_instant(self.ts),
            "price": self.price,
            "units": self.units,
            "cost": self.cost,
            "cum_units": self.cum_units,
            "cum_cost": self.cum_cost,
            "value": self.value,
        }


@dataclass(frozen=True)
class BacktestSummary:
    """Aggregate totals derived from the step list."""
    invested: float = 0.0
    units: float = 0.0
    avg_cost: float = 0.0
    end_value: float = 0.0
    pnl_abs: float = 0.0
    pnl_pct: float = 0.0
    periods: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "invested": self.invested,
            "units": self.units,
            "avg_cost": self.avg_cost,
            "end_value": self.end_value,
            "pnl_abs": self.pnl_abs,
            "pnl_pct": self.pnl_pct,
            "periods": self.periods,
        }


@dataclass(frozen=True)
class PerformanceMetrics:
    """Risk and return statistics over the step values."""
    cagr_pct: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_pct: float = 0.0
    peak_at: Optional[datetime] = None
    trough_at: Optional[datetime] = None
    sharpe_ratio: float = 0.0
    volatility_pct: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "cagr_pct": self.cagr_pct,
            "max_drawdown": self.max_drawdown,
            "max_drawdown_pct": self.max_drawdown_pct,
            "peak_at": format_instant(self.peak_at) if self.peak_at else None,
            "trough_at": format_instant(self.trough_at) if self.trough_at else None,
            "sharpe_ratio": self.sharpe_ratio,
            "volatility_pct": self.volatility_pct,
        }


@dataclass(frozen=True)
class BacktestReport:
    """Complete result of one backtest run."""
    request: BacktestRequest
    steps: list[BacktestStep]
    summary: BacktestSummary
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    missed: list[datetime] = field(default_factory=list)

    @property
    def periods(self) -> int:
        return self.summary.periods

    def to_dict(self) -> dict[str, Any]:
        """Render for the reporting layer with ISO8601 instants."""
        return {
            "inputs": self.request.to_dict(),
            "periods": self.periods,
            "fills": [step.to_dict() for step in self.steps],
            "totals": self.summary.to_dict(),
            "metrics": self.metrics.to_dict(),
            "missed": [format_instant(ts) for ts in self.missed],
        }

