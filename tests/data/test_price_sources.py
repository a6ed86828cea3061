"""Tests for price history sources"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import orjson
import pytest

from dca_app.backtest.models import PriceObservation
from dca_app.data.price_sources import (
    InMemoryPriceSource,
    JsonFilePriceSource,
    PriceHistoryService,
    granularity_step,
)
from dca_app.errors import MalformedDataError, MissingPriceDataError, PriceSourceError


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestInMemoryPriceSource:
    """Test the in-process source"""

    def test_fetch_filters_range(self, weekday_series):
        source = InMemoryPriceSource()
        source.load("BTC-USDC", weekday_series)

        result = source.fetch("BTC-USDC", utc(2024, 1, 8), utc(2024, 1, 12, 23, 0))

        assert [obs.price for obs in result] == [105.0, 106.0, 107.0, 108.0, 109.0]

    def test_fetch_unknown_pair(self):
        assert InMemoryPriceSource().fetch("DOGE-USDC", utc(2024, 1, 1), utc(2024, 2, 1)) == []

    def test_granularity_keyed(self, weekday_series):
        source = InMemoryPriceSource()
        source.load("BTC-USDC", weekday_series, granularity="1d")
        assert source.fetch("BTC-USDC", utc(2024, 1, 1), utc(2024, 2, 1), granularity="1h") == []

    def test_seed_synthetic_deterministic(self):
        first = InMemoryPriceSource().seed_synthetic("BTC-USDC", utc(2024, 1, 1), utc(2024, 1, 31), seed=7)
        second = InMemoryPriceSource().seed_synthetic("BTC-USDC", utc(2024, 1, 1), utc(2024, 1, 31), seed=7)

        assert first == second
        assert len(first) == 31
        assert all(obs.price >= 4500.0 for obs in first)

    def test_seed_synthetic_hourly(self):
        observations = InMemoryPriceSource().seed_synthetic(
            "ETH-USDC", utc(2024, 1, 1), utc(2024, 1, 1, 23, 0), granularity="1h"
        )
        assert len(observations) == 24
        assert observations[1].ts - observations[0].ts == timedelta(hours=1)

    def test_with_synthetic_history(self):
        now = utc(2024, 6, 1, 15, 30)
        source = InMemoryPriceSource.with_synthetic_history(["BTC-USDC", "GOLD-USD"], days=30, now=now)

        series = source.fetch("GOLD-USD", utc(2024, 1, 1), now)
        assert len(series) == 31
        assert series[-1].ts == utc(2024, 6, 1)


class TestJsonFilePriceSource:
    """Test the file-backed source"""

    def test_reads_pair_file(self, tmp_path):
        rows = [{"ts": "2024-01-0%dT21:00:00Z" % d, "close": 10.0 + d} for d in range(1, 6)]
        (tmp_path / "BTC-USDC-1d.json").write_bytes(orjson.dumps(rows))
        source = JsonFilePriceSource(tmp_path)

        result = source.fetch("BTC-USDC", utc(2024, 1, 2), utc(2024, 1, 4, 23, 0))

        assert [obs.price for obs in result] == [12.0, 13.0, 14.0]
        assert source.health_check() is True

    def test_missing_file(self, tmp_path):
        assert JsonFilePriceSource(tmp_path).fetch("BTC-USDC", utc(2024, 1, 1), utc(2024, 2, 1)) == []

    def test_health_check_missing_directory(self, tmp_path):
        assert JsonFilePriceSource(tmp_path / "absent").health_check() is False


class TestPriceHistoryService:
    """Test the service wrapper"""

    def test_default_adapter(self):
        assert PriceHistoryService().adapter.name == "in_memory"

    def test_set_adapter(self, tmp_path):
        service = PriceHistoryService()
        service.set_adapter(JsonFilePriceSource(tmp_path))
        assert service.adapter.name == "json_file"

    def test_wraps_adapter_failure(self):
        adapter = MagicMock()
        adapter.name = "exchange"
        adapter.fetch.side_effect = RuntimeError("rate limited")

        with pytest.raises(PriceSourceError) as exc_info:
            PriceHistoryService(adapter).get_observations("BTC-USDC", utc(2024, 1, 1), utc(2024, 2, 1))

        assert exc_info.value.symbol_pair == "BTC-USDC"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_data_quality_errors_pass_through(self, tmp_path):
        (tmp_path / "BTC-USDC-1d.json").write_bytes(b"not json")
        service = PriceHistoryService(JsonFilePriceSource(tmp_path))

        with pytest.raises(MalformedDataError):
            service.get_observations("BTC-USDC", utc(2024, 1, 1), utc(2024, 2, 1))

    def test_latest_price(self):
        source = InMemoryPriceSource()
        source.load("BTC-USDC", [
            PriceObservation(ts=utc(2024, 1, 1, 12, 0), price=1.0),
            PriceObservation(ts=utc(2024, 1, 2, 12, 0), price=2.0),
        ])
        assert PriceHistoryService(source).latest_price("BTC-USDC", now=utc(2024, 1, 2, 18, 0)) == 2.0

    def test_latest_price_missing(self):
        with pytest.raises(MissingPriceDataError):
            PriceHistoryService().latest_price("BTC-USDC", now=utc(2024, 1, 2))


class TestGranularity:
    """Test granularity codes"""

    def test_known(self):
        assert granularity_step("4h") == timedelta(hours=4)

    def test_unknown(self):
        with pytest.raises(ValueError):
            granularity_step("15m")
