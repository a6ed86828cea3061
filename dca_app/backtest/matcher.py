"""Price lookup with snap-forward matching and a staleness window"""

from bisect import bisect_left
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Optional

from ..utils.time import ensure_utc
from .models import PriceObservation

DEFAULT_TOLERANCE = timedelta(hours=48)


def sort_observations(series: Iterable[PriceObservation]) -> list[PriceObservation]:
    """
    Return the series as a new ascending list.

    The caller's sequence is never reordered in place.
    """
    observations = list(series)
    if any(later.ts < earlier.ts for earlier, later in zip(observations, observations[1:])):
        observations.sort(key=lambda obs: obs.ts)
    return observations


def match_price(
    series: Iterable[PriceObservation],
    target: datetime,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> Optional[PriceObservation]:
    """
    Match a target instant to a price observation.

    1. The first observation at or after target is returned unconditionally
       (weekend and holiday gaps snap forward to the next trading day).
    2. Past the end of the series, the last observation is returned if it
       is at most `tolerance` older than target.
    3. Otherwise None: a missed execution the caller must skip.

    Args:
        series: Price observations, ideally ascending
        target: Scheduled execution instant
        tolerance: Staleness window for the last observation (default 48h)

    Returns:
        Matched observation or None
    """
    return SnapForwardMatcher(series, tolerance).match(target)


class SnapForwardMatcher:
    """Matcher over one immutable, pre-sorted snapshot of a price series"""

    def __init__(self, series: Iterable[PriceObservation], tolerance: timedelta = DEFAULT_TOLERANCE):
        self.observations = sort_observations(series)
        self.tolerance = tolerance
        self._timestamps = [ensure_utc(obs.ts) for obs in self.observations]

    @property
    def last_observation(self) -> Optional[PriceObservation]:
        return self.observations[-1] if self.observations else None

    def match(self, target: datetime) -> Optional[PriceObservation]:
        """Match a single target instant; see match_price."""
        if not self.observations:
            return None

        target = ensure_utc(target)
        index = bisect_left(self._timestamps, target)
        if index < len(self.observations):
            return self.observations[index]

        if target - self._timestamps[-1] <= self.tolerance:
            return self.observations[-1]

        return None
