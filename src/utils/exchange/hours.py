"""Typed, validated, and fully-encapsulated representation of a wall-clock interval.

Used for a market's regular session and for its optional lunch break. Both bounds are
required "HH:MM" strings in the market's local time, and the interval is half-open:
``open`` belongs to it, ``close`` does not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Tuple


# pylint: disable=too-few-public-methods
@dataclass(frozen=True)
class Hours:
    """Container for a single ``[open, close)`` wall-clock interval.

    * open: Opening time in "HH:MM" format.
    * close: Closing time in "HH:MM" format, strictly after ``open``.
    """

    open: str
    close: str

    def __post_init__(self) -> None:
        """Validate both bounds and their ordering."""
        Hours.parse(self.open, "open")
        Hours.parse(self.close, "close")
        if self.open_minutes >= self.close_minutes:
            raise ValueError("`open` must be < `close`")

    @staticmethod
    def parse(value: Any, field: str) -> Tuple[int, int]:
        """Validate an "HH:MM" string and return it as ``(hour, minute)``."""
        if not isinstance(value, str):
            raise TypeError(f"`{field}` must be a string")
        if not re.fullmatch(r"\d{2}:\d{2}", value):
            raise ValueError(f"`{field}` must be in 'HH:MM' format")
        hours, minutes = map(int, value.split(":"))
        if not (0 <= hours <= 23 and 0 <= minutes <= 59):
            raise ValueError(f"`{field}` must be a valid time between 00:00 and 23:59")
        return hours, minutes

    @property
    def open_hm(self) -> Tuple[int, int]:
        """Return the opening time as ``(hour, minute)``."""
        return Hours.parse(self.open, "open")

    @property
    def close_hm(self) -> Tuple[int, int]:
        """Return the closing time as ``(hour, minute)``."""
        return Hours.parse(self.close, "close")

    @property
    def open_minutes(self) -> int:
        """Return the opening time as minutes since local midnight."""
        hour, minute = self.open_hm
        return hour * 60 + minute

    @property
    def close_minutes(self) -> int:
        """Return the closing time as minutes since local midnight."""
        hour, minute = self.close_hm
        return hour * 60 + minute

    def contains(self, minute_of_day: int) -> bool:
        """Return ``True`` if *minute_of_day* falls in ``[open, close)``."""
        return self.open_minutes <= minute_of_day < self.close_minutes

    def within(self, other: Hours) -> bool:
        """Return ``True`` if this interval lies entirely inside *other*."""
        return (
            other.open_minutes <= self.open_minutes
            and self.close_minutes <= other.close_minutes
        )

    def to_json(self) -> Any:
        """Object to JSON."""
        return {"open": self.open, "close": self.close}
