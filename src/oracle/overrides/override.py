"""Operator-supplied, time-bounded forced status for one market."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser  # type: ignore

from src.oracle.errors import OverrideFormatError
from src.oracle.status import OVERRIDABLE_STATUSES, MarketStatus


@dataclass(frozen=True)
class Override:
    """A forced ``status`` with its ``reason``, valid until ``expires_at``."""

    status: MarketStatus
    reason: str
    expires_at: datetime

    def is_active(self, now: datetime) -> bool:
        """Return ``True`` while ``expires_at`` is still in the future."""
        return self.expires_at > now

    @staticmethod
    def from_entry(entry: Any) -> Override:
        """Parse a store entry of the form ``{status, reason, expires}``.

        ``expires`` is an ISO-8601 instant; one without an offset is read as UTC.
        Raises :class:`OverrideFormatError` for anything else.
        """
        if not isinstance(entry, dict):
            raise OverrideFormatError(f"Override entry must be an object, got: {entry!r}")
        raw_status = entry.get("status")
        try:
            status = MarketStatus(str(raw_status).strip().upper())
        except ValueError as exc:
            raise OverrideFormatError(f"Override status is invalid: {raw_status!r}") from exc
        if status not in OVERRIDABLE_STATUSES:
            raise OverrideFormatError(f"Override status is invalid: {raw_status!r}")
        reason = entry.get("reason")
        if not isinstance(reason, str) or len(reason.strip()) == 0:
            raise OverrideFormatError("Override reason must be a non-empty string")
        raw_expires = entry.get("expires")
        if not isinstance(raw_expires, str):
            raise OverrideFormatError(f"Override expires is invalid: {raw_expires!r}")
        try:
            expires_at = date_parser.isoparse(raw_expires)
        except (ValueError, OverflowError) as exc:
            raise OverrideFormatError(
                f"Override expires is not ISO-8601: {raw_expires!r}"
            ) from exc
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return Override(status=status, reason=reason.strip(), expires_at=expires_at)
