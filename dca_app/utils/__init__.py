"""
Utility functions module.

Common utility functions for time handling shared across the scheduler
and the backtester.

Time Semantics:
- Every instant crossing a module boundary is a timezone-aware UTC datetime
- Naive datetimes supplied by callers are interpreted as UTC
- "Now" is always injectable; wall-clock time is only a last-resort fallback
- Civil wall-clock times are only meaningful together with a named timezone
"""
