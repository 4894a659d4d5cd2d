"""Status and provenance values carried by every receipt."""

from enum import Enum


class MarketStatus(str, Enum):
    """Trading state of a market as reported by the oracle."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    HALTED = "HALTED"
    UNKNOWN = "UNKNOWN"
    # liveness receipts only
    OK = "OK"


class StatusSource(str, Enum):
    """Where a reported status came from."""

    SCHEDULE = "SCHEDULE"
    OVERRIDE = "OVERRIDE"
    SYSTEM = "SYSTEM"


OVERRIDABLE_STATUSES = frozenset(
    {MarketStatus.OPEN, MarketStatus.CLOSED, MarketStatus.HALTED, MarketStatus.UNKNOWN}
)
