#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dca_app.config.loader import ConfigLoader
from dca_app.config.validation import ConfigValidator, ValidationError


def validate_pair_config(symbol_pair: str) -> List[ValidationError]:
    """Validate merged configuration for a specific symbol pair."""
    loader = ConfigLoader.create()
    config = loader.merge_config(symbol_pair)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("🔍 Validating DCA App configuration...")

    loader = ConfigLoader.create()
    symbol_pairs = list(loader.defaults.limits.supported_pairs) + ["*"]

    all_valid = True

    for symbol_pair in symbol_pairs:
        print(f"\n📊 Validating {symbol_pair}...")

        try:
            errors = validate_pair_config(symbol_pair)

            if errors:
                print(f"❌ Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  • {error.field}: {error.message} (value: {error.value})")
                all_valid = False
            else:
                config = loader.build_config(symbol_pair)
                print(f"✅ {symbol_pair} configuration is valid "
                      f"(tz={config.schedule.timezone}, tolerance={config.backtest.tolerance_hours}h)")

        except Exception as e:
            print(f"❌ Error validating {symbol_pair}: {e}")
            all_valid = False

    # Per-call overrides
    print(f"\n📋 Testing per-call overrides...")
    test_overrides = {
        "schedule": {"timezone": "Europe/London", "default_time_of_day": "08:30"},
        "backtest": {"tolerance_hours": 24},
    }

    errors = ConfigValidator.validate_config(loader.merge_config("BTC-USDC", test_overrides))
    if errors:
        print(f"❌ Override validation failed:")
        for error in errors:
            print(f"  • {error.field}: {error.message}")
        all_valid = False
    else:
        print(f"✅ Override validation passed")

    if all_valid:
        print(f"\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print(f"\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
