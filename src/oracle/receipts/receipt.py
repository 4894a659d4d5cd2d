"""Receipt value objects.

A :class:`Receipt` is issued fresh per request and never stored; it is valid from
``issued_at`` until ``expires_at`` and must not be acted upon afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from src.oracle.status import MarketStatus, StatusSource
from src.utils.exchange.local_clock import LocalClock


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True)
class Receipt:
    """Signed attestation of a market's status at ``issued_at``."""

    receipt_id: str
    issued_at: datetime
    expires_at: datetime
    mic: str
    status: MarketStatus
    source: StatusSource
    schema_version: str
    signing_key_id: str
    reason: Optional[str] = None
    signature: Optional[str] = None

    def signed_fields(self) -> Dict[str, str]:
        """Return every field covered by the signature, as strings.

        ``reason`` is only present on override receipts.
        """
        fields = {
            "receipt_id": self.receipt_id,
            "issued_at": LocalClock.iso_utc(self.issued_at),
            "expires_at": LocalClock.iso_utc(self.expires_at),
            "mic": self.mic,
            "status": self.status.value,
            "source": self.source.value,
            "schema_version": self.schema_version,
            "signing_key_id": self.signing_key_id,
        }
        if self.source is StatusSource.OVERRIDE and self.reason is not None:
            fields["reason"] = self.reason
        return fields

    def to_json(self) -> Any:
        """Object to JSON."""
        return {**self.signed_fields(), "signature": self.signature}


@dataclass(frozen=True)
class CriticalFailure:
    """Unsigned signal that the oracle cannot sign anything right now."""

    message: str
    error: str = "CRITICAL_FAILURE"
    status: MarketStatus = MarketStatus.UNKNOWN
    source: StatusSource = StatusSource.SYSTEM

    def to_json(self) -> Any:
        """Object to JSON."""
        return {
            "error": self.error,
            "message": self.message,
            "status": self.status.value,
            "source": self.source.value,
        }
