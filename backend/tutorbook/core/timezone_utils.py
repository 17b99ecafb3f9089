"""
Timezone utilities for the Tutorbook platform.

Scheduling never reads the ambient clock directly: services receive a
``Clock`` that carries the timezone used to resolve calendar days and
"today". Tests inject a ``FixedClock``.
"""

from datetime import date, datetime, time, tzinfo
from typing import Optional, Union

import pytz

from .config import settings


def get_timezone(name: Optional[str] = None) -> tzinfo:
    """
    Resolve a timezone name to a pytz timezone.

    Args:
        name: IANA timezone name; defaults to settings.default_timezone

    Returns:
        pytz timezone object
    """
    return pytz.timezone(name or settings.default_timezone)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Attach tz to a naive wall-clock datetime."""
    if value.tzinfo is not None:
        return value.astimezone(tz)
    if hasattr(tz, "localize"):
        return tz.localize(value)
    return value.replace(tzinfo=tz)


def to_local(value: datetime, tz: tzinfo) -> datetime:
    """
    Wall-clock time in tz.

    Aware datetimes are converted. Naive datetimes are already wall-clock
    values in tz, the same way Clock.start_of_day reads them; timestamps
    read back from storage go through to_utc first.
    """
    return localize(value, tz)


def to_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are stored timestamps and already UTC."""
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def combine_local(day: date, wall_time: time, tz: tzinfo) -> datetime:
    """Build an aware datetime for a wall-clock time on a calendar day."""
    return localize(datetime.combine(day, wall_time), tz)


class Clock:
    """Source of 'now' bound to a timezone."""

    def __init__(self, tz: Union[str, tzinfo, None] = None):
        self.tz: tzinfo = get_timezone(tz) if tz is None or isinstance(tz, str) else tz

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def start_of_day(self, value: Union[date, datetime]) -> date:
        """
        Normalize a date or datetime to its calendar day in this clock's zone.

        Aware datetimes are converted into the clock's zone first; naive
        datetimes are taken as wall-clock values.
        """
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self.tz)
            return value.date()
        return value


class FixedClock(Clock):
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime, tz: Union[str, tzinfo, None] = None):
        super().__init__(tz)
        self._instant = localize(instant, self.tz)

    def now(self) -> datetime:
        return self._instant


def get_default_clock() -> Clock:
    """Clock in the platform default timezone."""
    return Clock(settings.default_timezone)
