"""Pytest configuration and shared fixtures."""

import pytest
from datetime import date, datetime, timedelta, timezone

from dca_app.backtest.models import BacktestRequest, PriceObservation
from dca_app.schedule.localizer import TimeOfDayLocalizer
from dca_app.schedule.models import Cadence, RecurrenceRule


def utc(*args: int) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def ny_localizer() -> TimeOfDayLocalizer:
    """Localizer for the default reference timezone."""
    return TimeOfDayLocalizer("America/New_York", fallback_utc_offset_hours=-5)


@pytest.fixture
def utc_localizer() -> TimeOfDayLocalizer:
    """Localizer where civil time equals UTC."""
    return TimeOfDayLocalizer("UTC", fallback_utc_offset_hours=0)


@pytest.fixture
def daily_rule() -> RecurrenceRule:
    """Daily rule at 10:00 civil time starting 2024-01-01."""
    return RecurrenceRule.create(Cadence.DAILY, date(2024, 1, 1), "10:00")


@pytest.fixture
def weekday_series() -> list[PriceObservation]:
    """Daily 21:00 UTC closes for January 2024, weekends omitted."""
    observations = []
    day = date(2024, 1, 1)
    price = 100.0
    while day <= date(2024, 1, 31):
        if day.weekday() < 5:
            observations.append(PriceObservation(
                ts=utc(day.year, day.month, day.day, 21, 0),
                price=price,
            ))
            price += 1.0
        day += timedelta(days=1)
    return observations


@pytest.fixture
def sample_backtest_request() -> BacktestRequest:
    """Daily BTC-USDC request over January 2024 at 14:00 UTC."""
    return BacktestRequest(
        base_symbol="BTC",
        quote_symbol="USDC",
        amount=100.0,
        cadence=Cadence.DAILY,
        start=utc(2024, 1, 1, 0, 0),
        end=utc(2024, 1, 31, 23, 59),
        time_of_day="14:00",
    )
