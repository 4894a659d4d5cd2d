"""Error taxonomy of the market-status oracle.

* Input errors (unknown MIC, API key problems) are surfaced to the caller before any receipt
  is attempted.
* Override and schedule failures are recovered by falling to the next issuance tier.
* Signing failures in the safety-net tier end in an unsigned critical-failure response.
"""

from src.utils.exchange.market_calendar import UnknownMarketError


class OracleError(Exception):
    """Base class of every error raised by the oracle itself."""


class CalendarConfigError(OracleError, ValueError):
    """Market calendar data is malformed."""


class OverrideStoreError(OracleError):
    """The override store could not be reached or read."""


class OverrideFormatError(OracleError, ValueError):
    """An override entry does not have the ``{status, reason, expires}`` shape."""


class SigningError(OracleError):
    """The signing key is missing or corrupt, or producing a signature failed."""


class ApiKeyError(OracleError):
    """The caller's API key is missing or not accepted."""

    REQUIRED = "API_KEY_REQUIRED"
    INVALID = "INVALID_API_KEY"

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


__all__ = [
    "ApiKeyError",
    "CalendarConfigError",
    "OracleError",
    "OverrideFormatError",
    "OverrideStoreError",
    "SigningError",
    "UnknownMarketError",
]
