"""Typed, validated, and immutable representation of one market's trading calendar.

A :class:`MarketConfig` is built once from ``config/markets.json`` and never mutated. It holds
the timezone, the regular session, year-keyed holiday sets, early closes, and an optional
lunch break. A year missing from ``holidays`` means the calendar for that year is unverified,
which callers must treat differently from "no holidays".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.utils.exchange.early_close import EarlyClose
from src.utils.exchange.hours import Hours


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True)
class MarketConfig:
    """Calendar of a single exchange.

    * mic: Market Identifier Code, upper-case.
    * name: Human-readable exchange name.
    * timezone: IANA timezone every wall-clock value is interpreted in.
    * regular: Regular session ``[open, close)``.
    * holidays: Calendar year -> full-holiday local dates.
    * early_closes: Dates whose session ends early.
    * lunch_break: Optional daily break inside the regular session.
    """

    mic: str
    name: str
    timezone: str
    regular: Hours
    holidays: Mapping[int, FrozenSet[date]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    early_closes: Tuple[EarlyClose, ...] = ()
    lunch_break: Optional[Hours] = None

    def __post_init__(self) -> None:
        MarketConfig._validate_str(self.mic, "mic")
        MarketConfig._validate_str(self.name, "name")
        MarketConfig._validate_timezone(self.timezone)
        if not isinstance(self.regular, Hours):
            raise TypeError("`regular` must be an instance of `Hours`")
        if self.lunch_break is not None:
            if not isinstance(self.lunch_break, Hours):
                raise TypeError("`lunch_break` must be `Hours | None`")
            if not self.lunch_break.within(self.regular):
                raise ValueError(
                    f"`lunch_break` of '{self.mic}' must lie inside the regular session"
                )
        for early in self.early_closes:
            close_hour, close_minute = early.close_hm
            close_minutes = close_hour * 60 + close_minute
            if not (
                self.regular.open_minutes < close_minutes <= self.regular.close_minutes
            ):
                raise ValueError(
                    f"Early close of '{self.mic}' on {early.day} must fall inside the "
                    "regular session"
                )
        # Freeze whatever mapping we were handed.
        frozen = {int(y): frozenset(d) for y, d in self.holidays.items()}
        object.__setattr__(self, "holidays", MappingProxyType(frozen))
        object.__setattr__(self, "early_closes", tuple(self.early_closes))

    @staticmethod
    def _validate_str(value: Any, field_name: str) -> None:
        if not isinstance(value, str) or len(value.strip()) == 0:
            raise ValueError(f"`{field_name}` must be a non-empty string")

    @staticmethod
    def _validate_timezone(value: Any) -> None:
        if not isinstance(value, str):
            raise TypeError("`timezone` must be a string")
        try:
            if len(value.strip()) == 0:
                raise ValueError("`timezone` is empty")
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Invalid timezone: '{value}'") from exc

    def has_coverage(self, year: int) -> bool:
        """Return ``True`` if the holiday list for *year* has been verified."""
        return year in self.holidays

    def is_holiday(self, day: date) -> bool:
        """Return ``True`` if *day* is a full holiday. Undefined for uncovered years."""
        return day in self.holidays.get(day.year, frozenset())

    def early_close_for(self, day: date) -> Optional[EarlyClose]:
        """Return the early close scheduled for *day*, if any."""
        for early in self.early_closes:
            if early.day == day:
                return early
        return None

    def to_directory_json(self) -> Dict[str, str]:
        """Return the public directory entry for this market."""
        return {"mic": self.mic, "name": self.name, "timezone": self.timezone}

    def to_json(self) -> Any:
        """Object to JSON."""
        return {
            "mic": self.mic,
            "name": self.name,
            "timezone": self.timezone,
            "sessions_hours": {
                "regular": self.regular.to_json(),
                "lunch_break": (
                    None if self.lunch_break is None else self.lunch_break.to_json()
                ),
            },
            "holidays": {
                str(year): sorted(d.isoformat() for d in days)
                for year, days in sorted(self.holidays.items())
            },
            "early_closes": [e.to_json() for e in self.early_closes],
        }

    @staticmethod
    def _extract_hours(sessions: dict, key: str, mic: str) -> Optional[Hours]:
        """Extract and validate one ``{open, close}`` segment of ``sessions_hours``."""
        segment = sessions.get(key)
        if segment is None:
            return None
        if not isinstance(segment, dict):
            raise ValueError(f"{key.capitalize()} hours of '{mic}' are invalid: '{segment}'")
        return Hours(segment.get("open"), segment.get("close"))

    @staticmethod
    def _extract_holidays(raw: Any, mic: str) -> Dict[int, FrozenSet[date]]:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"Holidays of '{mic}' are invalid: '{raw}'")
        holidays: Dict[int, FrozenSet[date]] = {}
        for year_key, dates in raw.items():
            if not str(year_key).isdigit():
                raise ValueError(f"Holiday year of '{mic}' is invalid: '{year_key}'")
            if not isinstance(dates, list):
                raise ValueError(f"Holidays of '{mic}' for {year_key} are invalid")
            year = int(year_key)
            parsed = frozenset(date.fromisoformat(d) for d in dates)
            stray = [d for d in parsed if d.year != year]
            if stray:
                raise ValueError(
                    f"Holidays of '{mic}' for {year} contain dates of another year: "
                    f"{', '.join(sorted(d.isoformat() for d in stray))}"
                )
            holidays[year] = parsed
        return holidays

    @staticmethod
    def from_parameter(mic: str, entry: Any) -> MarketConfig:
        """Build and validate a :class:`MarketConfig` from its ``markets.json`` entry."""
        if not isinstance(entry, dict):
            raise ValueError(f"Market entry of '{mic}' is invalid: '{entry}'")
        sessions = entry.get("sessions_hours")
        if not isinstance(sessions, dict):
            raise ValueError(f"The sessions hours of '{mic}' are invalid: '{sessions}'")
        regular = MarketConfig._extract_hours(sessions, "regular", mic)
        if regular is None:
            raise ValueError(f"The regular session of '{mic}' is not defined")
        early_closes = entry.get("early_closes") or []
        if not isinstance(early_closes, list):
            raise ValueError(f"Early closes of '{mic}' are invalid: '{early_closes}'")
        return MarketConfig(
            mic=mic.strip().upper(),
            name=entry.get("name"),
            timezone=entry.get("timezone"),
            regular=regular,
            holidays=MarketConfig._extract_holidays(entry.get("holidays"), mic),
            early_closes=tuple(EarlyClose.from_parameter(e, mic) for e in early_closes),
            lunch_break=MarketConfig._extract_hours(sessions, "lunch_break", mic),
        )
