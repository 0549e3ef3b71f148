from datetime import datetime, date, time, timedelta
from typing import Callable, NamedTuple, Optional

import pytz
from dateutil import tz

import weekview.settings as settings


class CivilDateTime(NamedTuple):
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    def date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def minutes(self) -> float:
        """Minutes since civil midnight, seconds as a fraction."""
        return self.hour * 60 + self.minute + self.second / 60


class CivilClock:
    """
    Converts instants to civil time in one fixed named timezone.

    Every conversion goes through the configured zone, never the host's local
    timezone. Naive datetimes are taken to be UTC.
    """

    def __init__(self, tz_name: str | None = None, now_fn: Optional[Callable[[], datetime]] = None):
        if tz_name is None:
            self.tz_name, self.zone = settings.TIMEZONE, settings.TZ_CIVIL
        else:
            zone = tz.gettz(tz_name)
            if zone is None:
                raise ValueError(f"Unknown timezone: {tz_name!r}")
            self.tz_name, self.zone = tz_name, zone
        self._now_fn = now_fn

    def __repr__(self):
        return f"CivilClock({self.tz_name!r})"

    @staticmethod
    def _aware(instant: datetime) -> datetime:
        if instant.tzinfo is None:
            return instant.replace(tzinfo=pytz.UTC)
        return instant

    def now(self) -> datetime:
        if self._now_fn is not None:
            return self._aware(self._now_fn())
        return datetime.now(tz=self.zone)

    def local(self, instant: datetime) -> datetime:
        """
        Naive wall-clock datetime of `instant` in the civil zone.
        """
        return self._aware(instant).astimezone(self.zone).replace(tzinfo=None)

    def to_civil(self, instant: datetime) -> CivilDateTime:
        wall = self.local(instant)
        return CivilDateTime(wall.year, wall.month, wall.day,
                             wall.hour, wall.minute, wall.second)

    def civil_date(self, instant: datetime) -> date:
        return self.local(instant).date()

    def minutes_from_midnight(self, instant: datetime) -> float:
        return self.to_civil(instant).minutes

    def to_instant(self, wall: datetime) -> datetime:
        """
        Aware instant for a naive civil wall time.
        Wall times inside a spring-forward gap are moved past the gap;
        ambiguous wall times resolve to their first occurrence.
        """
        aware = wall.replace(tzinfo=self.zone, fold=0)
        return tz.resolve_imaginary(aware)

    def day_bounds(self, day: date) -> tuple[datetime, datetime]:
        """
        Civil [00:00, next 00:00) of `day` as naive wall datetimes.
        """
        start = datetime.combine(day, time.min)
        return start, start + timedelta(days=1)

    def start_of_day(self, day: date) -> datetime:
        return self.to_instant(datetime.combine(day, time.min))

    def add_civil_days(self, instant: datetime, days: int) -> datetime:
        """
        Shift by whole civil days, keeping the wall-clock time of day.
        """
        return self.to_instant(self.local(instant) + timedelta(days=days))


def default_clock() -> CivilClock:
    return CivilClock()
