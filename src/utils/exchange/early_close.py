"""Half-day trading sessions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Tuple

from src.utils.exchange.hours import Hours


@dataclass(frozen=True)
class EarlyClose:
    """A single local date whose session ends at ``close`` instead of the regular close.

    Half days carry no lunch break.
    """

    day: date
    close: str

    def __post_init__(self) -> None:
        if not isinstance(self.day, date):
            raise TypeError("`date` must be a `datetime.date`")
        Hours.parse(self.close, "close")

    @property
    def close_hm(self) -> Tuple[int, int]:
        """Return the early closing time as ``(hour, minute)``."""
        return Hours.parse(self.close, "close")

    @staticmethod
    def from_parameter(entry: Any, mic: str) -> EarlyClose:
        """Build from a ``{"date": "YYYY-MM-DD", "close": "HH:MM"}`` entry."""
        if not isinstance(entry, dict):
            raise ValueError(f"Early close of '{mic}' is invalid: '{entry}'")
        raw_date = entry.get("date")
        if not isinstance(raw_date, str):
            raise ValueError(f"Early close date of '{mic}' is invalid: '{raw_date}'")
        return EarlyClose(date.fromisoformat(raw_date), entry.get("close"))

    def to_json(self) -> Any:
        """Object to JSON."""
        return {"date": self.day.isoformat(), "close": self.close}
