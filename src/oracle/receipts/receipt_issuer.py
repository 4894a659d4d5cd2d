"""Tiered receipt issuance.

Every request walks a strict linear chain and stops at the first tier that produces a
result; no tier is retried or skipped:

* Tier 0, override: an active operator override is signed with ``source=OVERRIDE``. Store
  or entry failures fall through to tier 1.
* Tier 1, schedule: the schedule engine's answer is signed. A missing calendar year comes
  back as a deliberate UNKNOWN/SYSTEM result and is signed like any other.
* Tier 2, safety net: only reached when tier 1 raised. Signs UNKNOWN/SYSTEM.
* Tier 3, catastrophic: only reached when tier 2 could not sign. Returns an unsigned
  :class:`CriticalFailure` telling the caller to treat every market as unknown.

Any exception raised while building or signing a receipt counts as a failure of the tier
that attempted it, so nothing but a receipt or a :class:`CriticalFailure` leaves
:meth:`ReceiptIssuer.issue`. Liveness receipts are tagged with their own
:attr:`IssuanceTier.LIVENESS`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Callable, Optional

from src.oracle.overrides.override_store import OverrideStore
from src.oracle.receipts.receipt import CriticalFailure, Receipt
from src.oracle.schedule.schedule_engine import ScheduleEngine
from src.oracle.signing.canonical_signer import CanonicalSigner
from src.oracle.status import MarketStatus, StatusSource
from src.utils.io.logger import Logger

CRITICAL_FAILURE_MESSAGE = (
    "Oracle signature system offline. Treat all market state as UNKNOWN and halt all "
    "execution until service is restored."
)
LIVENESS_MIC = "ALL"


class IssuanceTier(IntEnum):
    """Tier that produced the final response."""

    OVERRIDE = 0
    SCHEDULE = 1
    SAFETY_NET = 2
    CATASTROPHIC = 3
    # health checks only; no market tier runs
    LIVENESS = 4


class OutcomeKind(str, Enum):
    """Typed result of an issuance."""

    SIGNED = "SIGNED"
    DELIBERATE_UNKNOWN = "DELIBERATE_UNKNOWN"
    FATAL_UNSIGNED = "FATAL_UNSIGNED"


@dataclass(frozen=True)
class IssuanceOutcome:
    """Final answer of one issuance: a signed receipt or an unsigned failure."""

    tier: IssuanceTier
    receipt: Optional[Receipt] = None
    failure: Optional[CriticalFailure] = None

    @property
    def kind(self) -> OutcomeKind:
        """Classify the outcome."""
        if self.receipt is None:
            return OutcomeKind.FATAL_UNSIGNED
        if self.receipt.status is MarketStatus.UNKNOWN:
            return OutcomeKind.DELIBERATE_UNKNOWN
        return OutcomeKind.SIGNED

    @property
    def signed(self) -> bool:
        """Return ``True`` if a signed receipt was produced."""
        return self.receipt is not None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_receipt_id() -> str:
    return str(uuid.uuid4())


# pylint: disable=too-many-arguments,too-many-positional-arguments
class ReceiptIssuer:
    """Orchestrates override store, schedule engine and signer for one MIC per call."""

    DEFAULT_TTL_SECONDS = 60
    DEFAULT_SCHEMA_VERSION = "v5.0"

    def __init__(
        self,
        engine: ScheduleEngine,
        signer: CanonicalSigner,
        override_store: Optional[OverrideStore] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        schema_version: str = DEFAULT_SCHEMA_VERSION,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_receipt_id,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("`ttl_seconds` must be positive")
        self._engine = engine
        self._signer = signer
        self._override_store = override_store
        self._ttl = timedelta(seconds=ttl_seconds)
        self._schema_version = schema_version
        self._clock = clock
        self._id_factory = id_factory

    @property
    def engine(self) -> ScheduleEngine:
        """Return the schedule engine used by tier 1."""
        return self._engine

    def issue(self, mic: str) -> IssuanceOutcome:
        """Run the tier chain for *mic*.

        Raises :class:`UnknownMarketError` before any tier when *mic* is not supported.
        """
        self._engine.calendar.get(mic)
        now = self._clock()
        receipt = self._tier_override(mic, now)
        if receipt is not None:
            return IssuanceOutcome(IssuanceTier.OVERRIDE, receipt=receipt)
        receipt = self._tier_schedule(mic, now)
        if receipt is not None:
            return IssuanceOutcome(IssuanceTier.SCHEDULE, receipt=receipt)
        receipt = self._tier_safety_net(mic, now)
        if receipt is not None:
            return IssuanceOutcome(IssuanceTier.SAFETY_NET, receipt=receipt)
        return self._catastrophic()

    def issue_liveness(self) -> IssuanceOutcome:
        """Sign an ``OK`` receipt proving the signing path works, or fail unsigned."""
        now = self._clock()
        try:
            receipt = self._signed(LIVENESS_MIC, now, MarketStatus.OK, StatusSource.SYSTEM)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            Logger.error(f"ORACLE_LIVENESS_FAILURE: {exc}")
            return self._catastrophic()
        return IssuanceOutcome(IssuanceTier.LIVENESS, receipt=receipt)

    def _tier_override(self, mic: str, now: datetime) -> Optional[Receipt]:
        if self._override_store is None:
            return None
        try:
            override = self._override_store.lookup(mic)
            if override is None:
                return None
            active = override.is_active(now)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            Logger.warning(f"ORACLE_TIER_0_UNAVAILABLE: {mic}: {exc}")
            return None
        if not active:
            Logger.debug(f"Ignoring expired override for {mic}")
            return None
        try:
            return self._signed(
                mic, now, override.status, StatusSource.OVERRIDE, override.reason
            )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            Logger.error(f"ORACLE_TIER_0_SIGNING_FAILURE: {mic}: {exc}")
            return None

    def _tier_schedule(self, mic: str, now: datetime) -> Optional[Receipt]:
        try:
            result = self._engine.current_status(mic, now)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            Logger.error(f"ORACLE_TIER_1_FAILURE: {mic}: {exc}")
            return None
        try:
            return self._signed(mic, now, result.status, result.source)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            Logger.error(f"ORACLE_TIER_1_FAILURE: {mic}: {exc}")
            return None

    def _tier_safety_net(self, mic: str, now: datetime) -> Optional[Receipt]:
        try:
            return self._signed(mic, now, MarketStatus.UNKNOWN, StatusSource.SYSTEM)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            Logger.error(f"ORACLE_TIER_2_CATASTROPHIC: {mic}: {exc}")
            return None

    @staticmethod
    def _catastrophic() -> IssuanceOutcome:
        return IssuanceOutcome(
            IssuanceTier.CATASTROPHIC, failure=CriticalFailure(CRITICAL_FAILURE_MESSAGE)
        )

    def _signed(
        self,
        mic: str,
        now: datetime,
        status: MarketStatus,
        source: StatusSource,
        reason: Optional[str] = None,
    ) -> Receipt:
        receipt = Receipt(
            receipt_id=self._id_factory(),
            issued_at=now,
            expires_at=now + self._ttl,
            mic=mic,
            status=status,
            source=source,
            schema_version=self._schema_version,
            signing_key_id=self._signer.key_id,
            reason=reason if source is StatusSource.OVERRIDE else None,
        )
        return replace(receipt, signature=self._signer.sign(receipt.signed_fields()))
