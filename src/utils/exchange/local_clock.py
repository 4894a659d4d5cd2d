"""Conversion between absolute instants and a named timezone's wall clock.

Offsets always come from the IANA database through :mod:`zoneinfo`, for the specific date
involved, so daylight-saving transitions are honoured without any fixed offset constants.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from functools import lru_cache

from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class WallClockParts:
    """What a clock hanging in the exchange shows at a given instant.

    ``weekday`` follows :meth:`datetime.date.weekday` (Monday = 0 ... Sunday = 6).
    """

    weekday: int
    year: int
    month: int
    day: int
    hour: int
    minute: int

    @property
    def local_date(self) -> date:
        """Return the local calendar date."""
        return date(self.year, self.month, self.day)

    @property
    def minute_of_day(self) -> int:
        """Return minutes elapsed since local midnight."""
        return self.hour * 60 + self.minute

    @property
    def is_weekend(self) -> bool:
        """Return ``True`` on local Saturday or Sunday."""
        return self.weekday >= 5


@lru_cache(maxsize=None)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def _require_aware(instant: datetime) -> None:
    if not isinstance(instant, datetime):
        raise TypeError("`instant` must be a `datetime`")
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError("`instant` must be timezone-aware")


class LocalClock:
    """Static helpers for wall-clock <-> instant conversion."""

    @staticmethod
    def wall_clock_parts_of(tz_name: str, instant: datetime) -> WallClockParts:
        """Return the wall-clock fields *tz_name* shows at *instant*."""
        _require_aware(instant)
        local = instant.astimezone(_zone(tz_name))
        return WallClockParts(
            weekday=local.weekday(),
            year=local.year,
            month=local.month,
            day=local.day,
            hour=local.hour,
            minute=local.minute,
        )

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    @staticmethod
    def instant_of(
        tz_name: str, year: int, month: int, day: int, hour: int, minute: int
    ) -> datetime:
        """Return the UTC instant at which *tz_name* shows the given wall clock.

        The zone's offset at the target local time cannot be looked up before an instant is
        known, so the wall-clock fields are first read as if they were UTC, the zone is asked
        what it shows at that provisional instant, and the provisional instant is shifted by
        the difference between requested and shown wall clock.
        """
        provisional = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
        shown = provisional.astimezone(_zone(tz_name))
        shown_as_utc = shown.replace(tzinfo=timezone.utc)
        return provisional + (provisional - shown_as_utc)

    @staticmethod
    def instant_of_date(tz_name: str, day: date, hour: int, minute: int) -> datetime:
        """Shortcut for :meth:`instant_of` taking a :class:`datetime.date`."""
        return LocalClock.instant_of(tz_name, day.year, day.month, day.day, hour, minute)

    @staticmethod
    def iso_utc(instant: datetime) -> str:
        """Format *instant* as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
        _require_aware(instant)
        utc = instant.astimezone(timezone.utc)
        return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
