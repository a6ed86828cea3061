"""Integration tests for scheduling and backtesting end to end."""

import pytest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import orjson

from dca_app.backtest.models import BacktestRequest
from dca_app.data.price_sources import InMemoryPriceSource, JsonFilePriceSource
from dca_app.engine import RecurringPurchaseEngine
from dca_app.schedule.generator import generate_execution_dates
from dca_app.schedule.models import Cadence, RecurrenceRule


NEW_YORK = ZoneInfo("America/New_York")


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.integration
class TestRuleLifecycle:
    """Create, fulfil and reschedule a rule across a full year."""

    def test_year_of_daily_fulfilments_keeps_civil_time(self) -> None:
        """Each run lands at 10:00 New York time through both DST transitions"""
        engine = RecurringPurchaseEngine()
        rule = RecurrenceRule.create(Cadence.DAILY, date(2024, 1, 1), "10:00")
        now = utc(2024, 1, 1)
        last_run_at = None

        for _ in range(366):
            next_run_at = engine.compute_next_run_at(rule, now, last_run_at)
            assert next_run_at > now
            local = next_run_at.astimezone(NEW_YORK)
            assert (local.hour, local.minute) == (10, 0)

            # Fulfilment: the rule store persists the run and re-anchors
            last_run_at = next_run_at
            now = next_run_at + timedelta(minutes=5)
            rule = rule.with_anchor(local.date())

        assert last_run_at.astimezone(NEW_YORK).date() == date(2024, 12, 31)

    @pytest.mark.parametrize("cadence,monthly_day", [
        (Cadence.DAILY, None),
        (Cadence.WEEKLY, None),
        (Cadence.MONTHLY, 12),
    ])
    def test_scheduler_agrees_with_backtest_dates(self, ny_localizer, cadence, monthly_day) -> None:
        """Feeding the scheduler its own output replays the historical execution dates"""
        engine = RecurringPurchaseEngine()
        rule = RecurrenceRule.create(cadence, date(2024, 1, 3), "09:15", monthly_day=monthly_day)
        start, end = utc(2024, 1, 3), utc(2024, 12, 31)

        expected = generate_execution_dates(rule, start, end, ny_localizer)

        scheduled = []
        last_run_at = None
        while True:
            last_run_at = engine.compute_next_run_at(rule, start, last_run_at)
            if last_run_at > end:
                break
            scheduled.append(last_run_at)

        assert scheduled == expected


@pytest.mark.integration
class TestBacktestPipeline:
    """Backtests against file-backed and synthetic price sources."""

    def test_weekly_backtest_from_json_file(self, tmp_path) -> None:
        synthetic = InMemoryPriceSource().seed_synthetic(
            "BTC-USDC", utc(2023, 1, 1), utc(2023, 12, 31, 23, 59), seed=42
        )
        rows = [{"ts": obs.ts.isoformat(), "close": obs.price} for obs in synthetic]
        (tmp_path / "BTC-USDC-1d.json").write_bytes(orjson.dumps({"data": rows}))

        engine = RecurringPurchaseEngine(price_source=JsonFilePriceSource(tmp_path))
        request = BacktestRequest(
            base_symbol="BTC",
            quote_symbol="USDC",
            amount=250.0,
            cadence=Cadence.WEEKLY,
            start=utc(2023, 1, 2),
            end=utc(2023, 12, 31, 23, 59),
        )

        report = engine.run_backtest(request)

        assert report.periods == 52
        assert report.missed == []
        assert report.summary.invested == pytest.approx(52 * 250.0)
        assert report.summary.end_value == pytest.approx(report.summary.units * synthetic[-1].price)
        assert all(step.ts.astimezone(NEW_YORK).weekday() == 0 for step in report.steps)
        assert report.steps[0].ts == utc(2023, 1, 2, 19, 0)

        rendered = orjson.loads(orjson.dumps(report.to_dict()))
        assert rendered["totals"]["periods"] == 52
        assert len(rendered["fills"]) == 52

    def test_monthly_backtest_with_synthetic_history(self) -> None:
        now = utc(2024, 7, 1)
        source = InMemoryPriceSource.with_synthetic_history(["ETH-USDC"], days=400, now=now)
        engine = RecurringPurchaseEngine(price_source=source)
        request = BacktestRequest(
            base_symbol="ETH",
            quote_symbol="USDC",
            amount=100.0,
            cadence=Cadence.MONTHLY,
            start=utc(2023, 7, 1, 12, 0),
            end=utc(2024, 6, 30, 23, 59),
            monthly_day=1,
        )

        report = engine.run_backtest(request)

        assert report.periods == 12
        assert [step.ts.astimezone(NEW_YORK).day for step in report.steps] == [1] * 12
        assert report.metrics.volatility_pct >= 0.0
