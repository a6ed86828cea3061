"""Unit tests for configuration management."""

import pytest
from pathlib import Path

from dca_app.config.defaults import BacktestParams, ScheduleParams, get_default_config
from dca_app.config.loader import ConfigLoader
from dca_app.config.validation import ConfigValidator


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Test that default configuration can be created."""
        config = get_default_config()
        assert config.schedule.timezone == "America/New_York"
        assert config.schedule.fallback_utc_offset_hours == -5
        assert config.schedule.default_time_of_day == "14:00"
        assert config.backtest.tolerance_hours == 48
        assert config.limits.min_amount == 1.0

    def test_defaults_are_frozen(self) -> None:
        """Test that parameter dataclasses are immutable."""
        params = ScheduleParams()
        with pytest.raises(AttributeError):
            params.timezone = "UTC"  # type: ignore[misc]


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        """Test that ConfigLoader can be created."""
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)
        assert (loader.config_dir / "pairs.yaml").exists()

    def test_merge_config_defaults_only(self) -> None:
        """Test config merging for a pair without overrides."""
        config = ConfigLoader.create().merge_config("BTC-USDC")

        assert config["backtest"]["tolerance_hours"] == 48
        assert config["schedule"]["timezone"] == "America/New_York"

    def test_merge_config_pair_overrides(self) -> None:
        """Test that pairs.yaml overrides apply per pair."""
        loader = ConfigLoader.create()

        assert loader.merge_config("GOLD-USD")["backtest"]["tolerance_hours"] == 72
        assert loader.merge_config("ETH-USDC")["limits"]["max_amount"] == 5000.0
        # Other defaults should remain
        assert loader.merge_config("GOLD-USD")["backtest"]["max_range_days"] == 1830

    def test_merge_config_with_overrides(self) -> None:
        """Test that per-call overrides take precedence over pair config."""
        loader = ConfigLoader.create()
        config = loader.merge_config("GOLD-USD", {"backtest": {"tolerance_hours": 24}})

        assert config["backtest"]["tolerance_hours"] == 24

    def test_build_config(self) -> None:
        """Test rebuilding typed parameters from merged config."""
        config = ConfigLoader.create().build_config("GOLD-USD", {"schedule": {"timezone": "UTC"}})

        assert isinstance(config.backtest, BacktestParams)
        assert config.backtest.tolerance_hours == 72
        assert config.schedule.timezone == "UTC"
        assert isinstance(config.limits.supported_pairs, tuple)

    def test_missing_pairs_file(self, tmp_path: Path) -> None:
        """Test that a directory without pairs.yaml uses defaults."""
        loader = ConfigLoader.create(tmp_path)
        assert loader.load_pair_config("GOLD-USD") == {}

    def test_custom_pairs_file(self, tmp_path: Path) -> None:
        """Test loading a custom pairs.yaml."""
        (tmp_path / "pairs.yaml").write_text(
            "pairs:\n  BTC-USDC:\n    schedule:\n      default_time_of_day: '09:30'\n"
        )
        config = ConfigLoader.create(tmp_path).build_config("BTC-USDC")
        assert config.schedule.default_time_of_day == "09:30"


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_schedule_params(self) -> None:
        params = {
            "timezone": "Europe/London",
            "fallback_utc_offset_hours": 0,
            "default_time_of_day": "09:00",
            "max_catchup_advances": 3,
        }
        assert ConfigValidator.validate_schedule_params(params) == []

    def test_unknown_timezone(self) -> None:
        errors = ConfigValidator.validate_schedule_params({"timezone": "Mars/Olympus_Mons"})
        assert len(errors) == 1
        assert errors[0].field == "timezone"

    def test_invalid_offset(self) -> None:
        errors = ConfigValidator.validate_schedule_params({"fallback_utc_offset_hours": 30})
        assert errors[0].field == "fallback_utc_offset_hours"

    def test_invalid_default_time(self) -> None:
        errors = ConfigValidator.validate_schedule_params({"default_time_of_day": "2pm"})
        assert errors[0].field == "default_time_of_day"

    def test_invalid_backtest_params(self) -> None:
        errors = ConfigValidator.validate_backtest_params({
            "tolerance_hours": -1,
            "max_periods": "many",
            "default_granularity": "15m",
        })
        assert {err.field for err in errors} == {"tolerance_hours", "max_periods", "default_granularity"}

    def test_inverted_amount_limits(self) -> None:
        errors = ConfigValidator.validate_limits_params({"min_amount": 100.0, "max_amount": 10.0})
        assert len(errors) == 1
        assert errors[0].field == "max_amount"

    def test_validate_config(self) -> None:
        config = {
            "schedule": {"max_catchup_advances": 0},
            "limits": {"min_amount": 0},
        }
        errors = ConfigValidator.validate_config(config)
        assert {err.field for err in errors} == {"max_catchup_advances", "min_amount"}
