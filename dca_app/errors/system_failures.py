"""
System failure error classifications for unrecoverable errors.

These exceptions represent failures of external collaborators that the
pure scheduling and simulation core cannot compensate for.
"""

from typing import Any, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PriceSourceError(SystemFailureError):
    """A price source adapter failed to return a series."""

    def __init__(self, message: str, source: Optional[str] = None,
                 symbol_pair: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source
        self.symbol_pair = symbol_pair
