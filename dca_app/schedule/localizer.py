"""
Civil time-of-day localization.

Converts a wall-clock time on a calendar date in a named timezone into an
absolute UTC instant, using the UTC offset in force on that date. When the
timezone database cannot provide the zone, a fixed offset approximation of
the reference timezone is used and a degraded-mode warning is logged.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from ..errors import TimezoneUnavailableError

logger = structlog.get_logger(__name__)


class TimeOfDayLocalizer:
    """Localizes civil times of day for one reference timezone."""

    def __init__(self, timezone_name: str, fallback_utc_offset_hours: int = -5):
        self.timezone_name = timezone_name
        self.fallback_tz = timezone(timedelta(hours=fallback_utc_offset_hours))
        self._warned = False

    def resolve_zone(self) -> ZoneInfo:
        """
        Load the reference zone from the timezone database.

        Raises:
            TimezoneUnavailableError: If the zone is unknown or tz data is missing
        """
        try:
            return ZoneInfo(self.timezone_name)
        except (ZoneInfoNotFoundError, ValueError, TypeError, OSError) as e:
            raise TimezoneUnavailableError(
                f"Timezone data unavailable for {self.timezone_name}: {e}",
                timezone_name=self.timezone_name,
            ) from e

    def localize(self, day: date, hour: int, minute: int) -> datetime:
        """
        Convert a civil wall-clock time on a date to a UTC instant.

        Non-existent wall-clock times inside a spring-forward gap resolve
        with the pre-transition offset; ambiguous times during a fall-back
        resolve to their first occurrence.

        Args:
            day: Civil calendar date
            hour: Civil hour (clamped to 0-23)
            minute: Civil minute (clamped to 0-59)

        Returns:
            Timezone-aware UTC datetime
        """
        hour = max(0, min(23, int(hour)))
        minute = max(0, min(59, int(minute)))

        try:
            zone = self.resolve_zone()
        except TimezoneUnavailableError as e:
            # One warning per localizer instance
            if not self._warned:
                logger.warning(
                    "Timezone data unavailable - using fixed offset",
                    timezone=e.timezone_name,
                    fallback_offset=str(self.fallback_tz),
                    fallback_strategy=e.fallback_strategy,
                )
                self._warned = True
            zone = self.fallback_tz

        local = datetime(day.year, day.month, day.day, hour, minute, tzinfo=zone)
        return local.astimezone(timezone.utc)

    def local_date(self, instant: datetime) -> date:
        """Civil date of a UTC instant in the reference timezone."""
        try:
            zone = self.resolve_zone()
        except TimezoneUnavailableError:
            zone = self.fallback_tz
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(zone).date()


def localize(
    day: date,
    hour: int,
    minute: int,
    timezone_name: str,
    fallback_utc_offset_hours: int = -5,
) -> datetime:
    """Convert a civil time on a date in the named zone to a UTC instant."""
    return TimeOfDayLocalizer(timezone_name, fallback_utc_offset_hours).localize(day, hour, minute)
