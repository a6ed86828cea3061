"""Default configuration parameters for scheduling and backtesting."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScheduleParams:
    """Recurrence scheduling parameters."""
    timezone: str = "America/New_York"               # Reference civil timezone
    fallback_utc_offset_hours: int = -5              # Fixed offset when tz data unavailable (EST)
    default_time_of_day: str = "14:00"               # Civil HH:MM when none supplied
    max_catchup_advances: int = 3                    # Guard on post-localize advances


@dataclass(frozen=True)
class BacktestParams:
    """Backtest simulation parameters."""
    tolerance_hours: int = 48                        # Staleness window for last observation
    max_range_days: int = 1830                       # Longest simulated range accepted
    max_periods: int = 10000                         # Cap on generated execution instants
    default_granularity: str = "1d"


@dataclass(frozen=True)
class LimitsParams:
    """Request limits applied by rule validation."""
    min_amount: float = 1.0
    max_amount: float = 10000.0
    supported_pairs: tuple[str, ...] = field(
        default=("BTC-USDC", "ETH-USDC", "GOLD-USD")
    )


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    schedule: ScheduleParams
    backtest: BacktestParams
    limits: LimitsParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        schedule=ScheduleParams(),
        backtest=BacktestParams(),
        limits=LimitsParams(),
    )
