#!/usr/bin/env python3
"""
Basic Usage Example - DCA Recurrence Scheduler and Backtester

This script demonstrates the two engine operations:
- Computing the next run of a recurring purchase rule, including fulfilment
- Backtesting a rule against synthetic price history

Run: python examples/basic_usage.py
"""

import json
from datetime import date, datetime, timedelta, timezone

from dca_app.backtest.models import BacktestRequest
from dca_app.data.price_sources import InMemoryPriceSource
from dca_app.engine import RecurringPurchaseEngine
from dca_app.logging import configure_logging
from dca_app.schedule.models import Cadence, RecurrenceRule


def demonstrate_scheduling(engine: RecurringPurchaseEngine) -> None:
    """Schedule a weekly rule and simulate three fulfilments."""
    print("\n📅 Scheduling a weekly rule (Mondays 10:00 New York time)")
    rule = RecurrenceRule.create(Cadence.WEEKLY, date(2024, 3, 4), "10:00")
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    last_run_at = None

    for _ in range(3):
        next_run_at = engine.compute_next_run_at(rule, now, last_run_at)
        print(f"  next run: {next_run_at.isoformat()} "
              f"(UTC {engine.execution_time_display(rule, next_run_at.date())})")
        last_run_at = next_run_at
        now = next_run_at + timedelta(minutes=1)


def demonstrate_backtest(engine: RecurringPurchaseEngine, now: datetime) -> None:
    """Backtest a daily BTC purchase over the last 90 days."""
    print("\n📈 Backtesting $50/day of BTC over 90 days")
    request = BacktestRequest(
        base_symbol="BTC",
        quote_symbol="USDC",
        amount=50.0,
        cadence=Cadence.DAILY,
        start=now - timedelta(days=90),
        end=now,
    )
    report = engine.run_backtest(request)

    print(json.dumps(report.to_dict()["totals"], indent=2))
    print(f"  missed executions: {len(report.missed)}")
    print(f"  max drawdown: {report.metrics.max_drawdown_pct:.2f}%")


def main() -> None:
    configure_logging(level="WARNING")
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    source = InMemoryPriceSource.with_synthetic_history(["BTC-USDC", "ETH-USDC"], days=365, now=now)
    engine = RecurringPurchaseEngine(price_source=source)

    demonstrate_scheduling(engine)
    demonstrate_backtest(engine, now)


if __name__ == "__main__":
    main()
