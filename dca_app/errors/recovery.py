"""
Recovery strategy classifications for error handling.

These categorize errors by their recovery characteristics and guide the
error handling strategy.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class TimezoneUnavailableError(GracefulDegradationError):
    """Timezone rules could not be loaded; a fixed offset is used instead."""

    def __init__(self, message: str, timezone_name: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            degraded_functionality="dst_aware_localization",
            fallback_strategy="fixed_utc_offset",
            **kwargs
        )
        self.timezone_name = timezone_name
