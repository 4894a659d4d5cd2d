"""Transport-agnostic handlers behind the public ``/v5`` endpoints.

Each handler returns an :class:`OracleResponse` (status code plus JSON-ready body); routing,
CORS and header plumbing belong to whatever HTTP layer hosts the oracle. Input errors are
answered here with 4xx bodies and never reach the issuance tiers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from src.oracle.errors import ApiKeyError, UnknownMarketError
from src.oracle.receipts.receipt import CriticalFailure
from src.oracle.receipts.receipt_issuer import (
    CRITICAL_FAILURE_MESSAGE,
    IssuanceOutcome,
    ReceiptIssuer,
)
from src.oracle.signing.signing_key import KeyRegistry
from src.utils.exchange.local_clock import LocalClock
from src.utils.io.logger import Logger

DEFAULT_MIC = "XNYS"
SCHEDULE_NOTE = (
    "Times are UTC. Schedule-based only — does not reflect real-time halts or overrides."
)


class ApiKeyVerifier(Protocol):  # pylint: disable=too-few-public-methods
    """External collaborator deciding whether an API key is accepted."""

    def is_valid(self, api_key: str) -> bool:
        """Return ``True`` if *api_key* may call the production endpoint."""


@dataclass(frozen=True)
class OracleResponse:
    """Status code and JSON body for the hosting transport to serialize."""

    status_code: int
    body: Any


def normalize_mic(mic: Optional[str], default: str = DEFAULT_MIC) -> str:
    """Trim and upper-case *mic*, falling back to *default* when blank."""
    if mic is None or len(mic.strip()) == 0:
        return default
    return mic.strip().upper()


class OracleService:
    """Builds every endpoint body from the issuer, its engine and the key registry."""

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    def __init__(
        self,
        issuer: ReceiptIssuer,
        key_registry: KeyRegistry,
        api_key_verifier: Optional[ApiKeyVerifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        schedule_note: str = SCHEDULE_NOTE,
    ) -> None:
        self._issuer = issuer
        self._keys = key_registry
        self._api_key_verifier = api_key_verifier
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._schedule_note = schedule_note

    def demo(self, mic: Optional[str] = None) -> OracleResponse:
        """Public sandbox: a signed receipt for *mic* (default XNYS)."""
        return self._issue(normalize_mic(mic))

    def status(self, mic: Optional[str], api_key: Optional[str]) -> OracleResponse:
        """Production endpoint: same as :meth:`demo` behind an API key check."""
        try:
            self._check_api_key(api_key)
        except ApiKeyError as exc:
            code = 401 if exc.code == ApiKeyError.REQUIRED else 403
            body = {"error": exc.code}
            if exc.code == ApiKeyError.REQUIRED:
                body["message"] = str(exc)
            return OracleResponse(code, body)
        return self._issue(normalize_mic(mic))

    def schedule(self, mic: Optional[str] = None) -> OracleResponse:
        """Unsigned, informational current status plus next open/close."""
        code = normalize_mic(mic)
        engine = self._issuer.engine
        try:
            market = engine.calendar.get(code)
        except UnknownMarketError as exc:
            return self._unknown_mic(exc)
        try:
            now = self._clock()
            current = engine.current_status(code, now)
            upcoming = engine.next_session(code, now)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            Logger.error(f"ORACLE_TOP_LEVEL_ERROR: schedule {code}: {exc}")
            return OracleResponse(500, CriticalFailure(CRITICAL_FAILURE_MESSAGE).to_json())
        session = {} if upcoming is None else upcoming.to_json()
        lunch = market.lunch_break
        return OracleResponse(
            200,
            {
                "mic": code,
                "name": market.name,
                "timezone": market.timezone,
                "queried_at": LocalClock.iso_utc(now),
                "current_status": current.status.value,
                "next_open": session.get("next_open"),
                "next_close": session.get("next_close"),
                "lunch_break": (
                    None if lunch is None else {"start": lunch.open, "end": lunch.close}
                ),
                "note": self._schedule_note,
            },
        )

    def exchanges(self) -> OracleResponse:
        """Static directory of supported markets."""
        return OracleResponse(
            200, {"exchanges": self._issuer.engine.calendar.directory()}
        )

    def keys(self) -> OracleResponse:
        """Key registry plus the canonical serialization needed to verify receipts."""
        return OracleResponse(200, self._keys.to_json())

    def health(self) -> OracleResponse:
        """Signed liveness receipt, or an unsigned 500 when signing is offline."""
        return self._respond(self._issuer.issue_liveness())

    def _issue(self, mic: str) -> OracleResponse:
        try:
            outcome = self._issuer.issue(mic)
        except UnknownMarketError as exc:
            return self._unknown_mic(exc)
        return self._respond(outcome)

    @staticmethod
    def _respond(outcome: IssuanceOutcome) -> OracleResponse:
        if outcome.receipt is not None:
            return OracleResponse(200, outcome.receipt.to_json())
        failure = outcome.failure
        return OracleResponse(500, None if failure is None else failure.to_json())

    def _check_api_key(self, api_key: Optional[str]) -> None:
        if api_key is None or len(api_key.strip()) == 0:
            raise ApiKeyError(ApiKeyError.REQUIRED, "Include X-Oracle-Key header")
        if self._api_key_verifier is None or not self._api_key_verifier.is_valid(
            api_key
        ):
            raise ApiKeyError(ApiKeyError.INVALID, "API key not accepted")

    @staticmethod
    def _unknown_mic(exc: UnknownMarketError) -> OracleResponse:
        return OracleResponse(
            400,
            {
                "error": "UNKNOWN_MIC",
                "message": (
                    f"Unsupported exchange: {exc.mic}. "
                    "See /v5/exchanges for supported markets."
                ),
                "supported": exc.supported,
            },
        )
