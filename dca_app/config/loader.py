"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import BacktestParams, DefaultConfig, LimitsParams, ScheduleParams, get_default_config


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_pair_config(self, symbol_pair: str) -> dict[str, Any]:
        """Load symbol-pair-specific configuration overrides."""
        pairs_file = self.config_dir / "pairs.yaml"

        if not pairs_file.exists():
            return {}

        with open(pairs_file) as f:
            pairs_config = yaml.safe_load(f) or {}

        return pairs_config.get("pairs", {}).get(symbol_pair, {}) or {}  # type: ignore[no-any-return]

    def merge_config(
        self,
        symbol_pair: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-call overrides (highest priority)
        2. Symbol-pair overrides from pairs.yaml
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        pair_config = self.load_pair_config(symbol_pair)
        config = self._deep_merge(config, pair_config)

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def build_config(
        self,
        symbol_pair: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """Merge configuration and rebuild the typed dataclass tree."""
        merged = self.merge_config(symbol_pair, overrides)
        limits = dict(merged.get("limits", {}))
        if "supported_pairs" in limits:
            limits["supported_pairs"] = tuple(limits["supported_pairs"])

        return DefaultConfig(
            schedule=ScheduleParams(**merged.get("schedule", {})),
            backtest=BacktestParams(**merged.get("backtest", {})),
            limits=LimitsParams(**limits),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name, _field in obj.__dataclass_fields__.items():
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
