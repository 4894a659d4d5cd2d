"""Override store interface and the adapters shipped with the oracle.

The production store is an external key-value service keyed by MIC. The oracle only needs
:meth:`OverrideStore.lookup`, so any backend can be plugged in. Lookups return the parsed
entry whether or not it has expired; the issuer decides what is still active.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from src.oracle.errors import OverrideStoreError
from src.oracle.overrides.override import Override
from src.utils.io.json_manager import JsonManager


@runtime_checkable
class OverrideStore(Protocol):
    """Anything that can answer "is there an override for this MIC?"."""

    def lookup(self, mic: str) -> Optional[Override]:
        """Return the override stored for *mic*, or ``None``.

        May raise :class:`OverrideStoreError` or
        :class:`src.oracle.errors.OverrideFormatError`.
        """


class InMemoryOverrideStore:
    """Dictionary-backed store holding raw entries, as a KV service would."""

    def __init__(self, entries: Optional[Dict[str, Any]] = None) -> None:
        self._entries: Dict[str, Any] = dict(entries or {})

    def put(self, mic: str, entry: Any) -> None:
        """Store a raw entry (a dict or its JSON text) for *mic*."""
        self._entries[mic.strip().upper()] = entry

    def clear(self, mic: str) -> None:
        """Remove any entry for *mic*."""
        self._entries.pop(mic.strip().upper(), None)

    def lookup(self, mic: str) -> Optional[Override]:
        raw = self._entries.get(mic)
        if raw is None:
            return None
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise OverrideStoreError(f"Override entry for {mic} is not JSON") from exc
        return Override.from_entry(raw)


class JsonFileOverrideStore:
    """Store reading a ``{MIC: {status, reason, expires}}`` JSON document on every lookup.

    Re-reading keeps operator edits visible without a restart. A missing file means no
    overrides; an unreadable one is a store failure.
    """

    def __init__(self, filepath: str) -> None:
        self._filepath = filepath

    @property
    def filepath(self) -> str:
        """Return the backing file path."""
        return self._filepath

    def lookup(self, mic: str) -> Optional[Override]:
        if not JsonManager.exists(self._filepath):
            return None
        document = JsonManager.load(self._filepath)
        if not isinstance(document, dict):
            raise OverrideStoreError(f"Override file {self._filepath} is unreadable")
        entry = document.get(mic)
        if entry is None:
            return None
        return Override.from_entry(entry)
