"""Schedule-derived market state.

:class:`ScheduleEngine` answers two questions from the static calendar alone: "is the market
in session at this instant?" and "when are the next open and close?". Both fail closed: if
the holiday calendar for the relevant year has not been verified, the answer is UNKNOWN (or no
next session at all), never a guess.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from src.oracle.status import MarketStatus, StatusSource
from src.utils.exchange.local_clock import LocalClock
from src.utils.exchange.market_calendar import MarketCalendar
from src.utils.exchange.market_config import MarketConfig
from src.utils.io.logger import Logger


@dataclass(frozen=True)
class ScheduleResult:
    """Status derived from the calendar, plus where it came from."""

    status: MarketStatus
    source: StatusSource


@dataclass(frozen=True)
class NextSession:
    """Next open and close instants, both in UTC."""

    next_open: datetime
    next_close: datetime

    def to_json(self) -> Any:
        """Object to JSON."""
        return {
            "next_open": LocalClock.iso_utc(self.next_open),
            "next_close": LocalClock.iso_utc(self.next_close),
        }


class ScheduleEngine:
    """Pure function of ``(mic, now, calendar)``; holds no mutable state."""

    DEFAULT_LOOKAHEAD_DAYS = 14

    def __init__(
        self, calendar: MarketCalendar, lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS
    ) -> None:
        if not isinstance(calendar, MarketCalendar):
            raise TypeError("`calendar` must be an instance of `MarketCalendar`")
        if lookahead_days <= 0:
            raise ValueError("`lookahead_days` must be positive")
        self._calendar = calendar
        self._lookahead_days = lookahead_days

    @property
    def calendar(self) -> MarketCalendar:
        """Return the shared market registry."""
        return self._calendar

    def current_status(self, mic: str, now: datetime) -> ScheduleResult:
        """Return whether *mic* is in its regular session at *now*.

        Raises :class:`UnknownMarketError` for an unknown MIC.
        """
        market = self._calendar.get(mic)
        parts = LocalClock.wall_clock_parts_of(market.timezone, now)
        if not market.has_coverage(parts.year):
            Logger.warning(
                f"CALENDAR_COVERAGE_GAP: {mic} has no verified holidays for {parts.year}"
            )
            return ScheduleResult(MarketStatus.UNKNOWN, StatusSource.SYSTEM)
        if parts.is_weekend:
            return self._closed()
        today = parts.local_date
        if market.is_holiday(today):
            return self._closed()
        minute_of_day = parts.minute_of_day
        early = market.early_close_for(today)
        if early is not None:
            close_hour, close_minute = early.close_hm
            is_open = (
                market.regular.open_minutes
                <= minute_of_day
                < close_hour * 60 + close_minute
            )
            return self._result(is_open)
        is_open = market.regular.contains(minute_of_day)
        if is_open and market.lunch_break is not None:
            is_open = not market.lunch_break.contains(minute_of_day)
        return self._result(is_open)

    def next_session(self, mic: str, now: datetime) -> Optional[NextSession]:
        """Return the next open/close pair for *mic*, or ``None`` if it cannot be vouched for.

        Walks forward from the zone-local date of *now*. When *now* is already inside a
        session, ``next_open`` is *now* itself (or the end of the lunch break while in it).
        """
        market = self._calendar.get(mic)
        start = LocalClock.wall_clock_parts_of(market.timezone, now).local_date
        for offset in range(self._lookahead_days):
            day = start + timedelta(days=offset)
            if not market.has_coverage(day.year):
                Logger.warning(
                    f"CALENDAR_COVERAGE_GAP: {mic} lookahead reached unverified year {day.year}"
                )
                return None
            if day.weekday() >= 5 or market.is_holiday(day):
                continue
            session = self._session_on(market, day, now)
            if session is not None:
                return session
        return None

    @staticmethod
    def _session_on(
        market: MarketConfig, day: date, now: datetime
    ) -> Optional[NextSession]:
        tz_name = market.timezone
        open_at = LocalClock.instant_of_date(tz_name, day, *market.regular.open_hm)
        early = market.early_close_for(day)
        close_hm = market.regular.close_hm if early is None else early.close_hm
        close_at = LocalClock.instant_of_date(tz_name, day, *close_hm)
        if close_at <= now:
            return None
        if open_at > now:
            return NextSession(open_at, close_at)
        if market.lunch_break is not None and early is None:
            lunch_start = LocalClock.instant_of_date(
                tz_name, day, *market.lunch_break.open_hm
            )
            lunch_end = LocalClock.instant_of_date(
                tz_name, day, *market.lunch_break.close_hm
            )
            if lunch_start <= now < lunch_end:
                return NextSession(lunch_end, close_at)
        return NextSession(now.astimezone(timezone.utc), close_at)

    @staticmethod
    def _closed() -> ScheduleResult:
        return ScheduleResult(MarketStatus.CLOSED, StatusSource.SCHEDULE)

    @staticmethod
    def _result(is_open: bool) -> ScheduleResult:
        return ScheduleResult(
            MarketStatus.OPEN if is_open else MarketStatus.CLOSED, StatusSource.SCHEDULE
        )
