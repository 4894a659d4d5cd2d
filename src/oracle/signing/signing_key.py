"""Published verification keys and their rotation windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from dateutil import parser as date_parser  # type: ignore

from src.oracle.signing.canonical_signer import CANONICAL_PAYLOAD_SPEC
from src.utils.exchange.local_clock import LocalClock


def _parse_instant(value: Any, field_name: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and len(value.strip()) > 0:
        try:
            parsed = date_parser.isoparse(value.strip())
        except ValueError as exc:
            raise ValueError(f"`{field_name}` is not ISO-8601: '{value}'") from exc
    else:
        raise ValueError(f"`{field_name}` is invalid: '{value}'")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class SigningKey:
    """One published public key.

    ``valid_until`` of ``None`` means no rotation is scheduled.
    """

    key_id: str
    public_key: str
    valid_from: datetime
    valid_until: Optional[datetime] = None
    algorithm: str = "Ed25519"
    format: str = "hex"

    def __post_init__(self) -> None:
        if not isinstance(self.key_id, str) or len(self.key_id.strip()) == 0:
            raise ValueError("`key_id` must be a non-empty string")
        if not isinstance(self.public_key, str):
            raise TypeError("`public_key` must be a string")
        if self.valid_until is not None and self.valid_until <= self.valid_from:
            raise ValueError("`valid_until` must be after `valid_from`")

    def is_valid_at(self, instant: datetime) -> bool:
        """Return ``True`` if *instant* lies in ``[valid_from, valid_until)``."""
        if instant < self.valid_from:
            return False
        return self.valid_until is None or instant < self.valid_until

    @staticmethod
    def from_parameter(entry: Any) -> SigningKey:
        """Build from a ``{key_id, public_key, valid_from, valid_until}`` entry."""
        if not isinstance(entry, dict):
            raise ValueError(f"Signing key entry is invalid: '{entry}'")
        valid_from = _parse_instant(entry.get("valid_from"), "valid_from")
        if valid_from is None:
            raise ValueError("`valid_from` is not defined")
        return SigningKey(
            key_id=entry.get("key_id"),
            public_key=entry.get("public_key"),
            valid_from=valid_from,
            valid_until=_parse_instant(entry.get("valid_until"), "valid_until"),
        )

    def to_json(self) -> Any:
        """Object to JSON."""
        return {
            "key_id": self.key_id,
            "algorithm": self.algorithm,
            "format": self.format,
            "public_key": self.public_key,
            "valid_from": LocalClock.iso_utc(self.valid_from),
            "valid_until": (
                None if self.valid_until is None else LocalClock.iso_utc(self.valid_until)
            ),
        }


class KeyRegistry:
    """Every key consumers may see on a receipt, selectable by ``key_id``.

    Several keys can be valid at once while a rotation is in progress.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: Iterable[SigningKey]) -> None:
        self._keys: List[SigningKey] = []
        for key in keys:
            if any(k.key_id == key.key_id for k in self._keys):
                raise ValueError(f"Duplicated signing key id: {key.key_id}")
            self._keys.append(key)

    def find(self, key_id: str) -> Optional[SigningKey]:
        """Return the key published under *key_id*, if any."""
        for key in self._keys:
            if key.key_id == key_id:
                return key
        return None

    def valid_at(self, instant: datetime) -> List[SigningKey]:
        """Return every key valid at *instant*."""
        return [k for k in self._keys if k.is_valid_at(instant)]

    def to_json(self) -> Any:
        """Return the public registry document, canonical serialization included."""
        return {
            "keys": [k.to_json() for k in self._keys],
            "canonical_payload_spec": dict(CANONICAL_PAYLOAD_SPEC),
        }
