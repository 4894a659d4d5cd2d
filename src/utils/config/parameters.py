"""Central configuration manager.

This module handles the loading of static parameters, secrets from the environment (``.env``
is honoured through python-dotenv), and paths to the JSON documents the oracle reads. It also
builds the long-lived collaborators (market calendar, signer, key registry, override store)
that are created once at process start and shared by every request.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from src.oracle.api.oracle_service import SCHEDULE_NOTE, ApiKeyVerifier, OracleService
from src.oracle.errors import CalendarConfigError, SigningError
from src.oracle.overrides.override_store import JsonFileOverrideStore, OverrideStore
from src.oracle.receipts.receipt_issuer import ReceiptIssuer
from src.oracle.schedule.schedule_engine import ScheduleEngine
from src.oracle.signing.canonical_signer import CanonicalSigner
from src.oracle.signing.signing_key import KeyRegistry, SigningKey
from src.utils.config.path_utils import PathUtils
from src.utils.exchange.market_calendar import MarketCalendar
from src.utils.io.json_manager import JsonManager
from src.utils.io.logger import Logger


class ParameterLoader:
    """Centralized configuration manager for every oracle parameter."""

    _MARKETS_FILEPATH = "config/markets.json"
    _OVERRIDES_FILEPATH = "config/overrides.json"
    _KEYS_FILEPATH = "config/keys.json"

    _ENV_FILEPATH = ".env"

    def __init__(self, env_filepath: Optional[str] = None):
        self.env_filepath = Path(env_filepath or ParameterLoader._ENV_FILEPATH)
        load_dotenv(dotenv_path=self.env_filepath)
        self._parameters: Dict[str, Any] = self._initialize_parameters()
        self._calendar: Optional[MarketCalendar] = None
        self._signer: Optional[CanonicalSigner] = None

    def _initialize_parameters(self) -> Dict[str, Any]:
        """Initializes the parameters dictionary by merging constants, secrets and paths."""
        constant_params = {
            "default_mic": "XNYS",
            "lookahead_days": ScheduleEngine.DEFAULT_LOOKAHEAD_DAYS,
            "receipt_ttl_seconds": ReceiptIssuer.DEFAULT_TTL_SECONDS,
            "schedule_note": SCHEDULE_NOTE,
            "schema_version": ReceiptIssuer.DEFAULT_SCHEMA_VERSION,
        }
        vulnerable_params = {
            "private_key": os.getenv("ED25519_PRIVATE_KEY"),
            "public_key": os.getenv("ED25519_PUBLIC_KEY"),
            "public_key_id": os.getenv("PUBLIC_KEY_ID") or "key_2026_v1",
            "public_key_valid_from": os.getenv("PUBLIC_KEY_VALID_FROM")
            or "2026-01-01T00:00:00Z",
            "public_key_valid_until": os.getenv("PUBLIC_KEY_VALID_UNTIL") or None,
        }
        path_params = {
            "keys_filepath": PathUtils.build(self._KEYS_FILEPATH),
            "markets_filepath": PathUtils.build(self._MARKETS_FILEPATH),
            "overrides_filepath": PathUtils.build(self._OVERRIDES_FILEPATH),
        }
        return {**vulnerable_params, **constant_params, **path_params}

    def get_all(self) -> Any:
        """Return all parameter."""
        return self._parameters

    def get(self, key: str, default: Any = None) -> Any:
        """Return parameter value if exists, else None."""
        try:
            return self._parameters[key]
        except KeyError:
            return default

    def __getitem__(self, key: str) -> Any:
        """Allow dict-style access to parameters."""
        return self._parameters[key]

    def market_calendar(self) -> MarketCalendar:
        """Return the market registry, loading it on first use."""
        if self._calendar is None:
            filepath = self.get("markets_filepath")
            try:
                self._calendar = MarketCalendar.load(filepath)
            except (OSError, ValueError, TypeError) as exc:
                raise CalendarConfigError(
                    f"Market calendar {filepath} is invalid: {exc}"
                ) from exc
        return self._calendar

    def schedule_engine(self) -> ScheduleEngine:
        """Return a schedule engine over the shared market registry."""
        return ScheduleEngine(self.market_calendar(), self.get("lookahead_days"))

    def signer(self) -> CanonicalSigner:
        """Return the signer for the active key; the secret is parsed lazily."""
        if self._signer is None:
            self._signer = CanonicalSigner(
                self.get("private_key"), self.get("public_key_id")
            )
        return self._signer

    def override_store(self) -> OverrideStore:
        """Return the file-backed override store."""
        return JsonFileOverrideStore(self.get("overrides_filepath"))

    def receipt_issuer(self) -> ReceiptIssuer:
        """Wire the tiered issuer from the shared collaborators."""
        return ReceiptIssuer(
            engine=self.schedule_engine(),
            signer=self.signer(),
            override_store=self.override_store(),
            ttl_seconds=self.get("receipt_ttl_seconds"),
            schema_version=self.get("schema_version"),
        )

    def oracle_service(
        self, api_key_verifier: Optional[ApiKeyVerifier] = None
    ) -> OracleService:
        """Return the endpoint handlers wired from this configuration."""
        return OracleService(
            issuer=self.receipt_issuer(),
            key_registry=self.key_registry(),
            api_key_verifier=api_key_verifier,
            schedule_note=self.get("schedule_note"),
        )

    def key_registry(self) -> KeyRegistry:
        """Return every published verification key, active key first."""
        keys: List[SigningKey] = []
        active = self._active_key()
        if active is not None:
            keys.append(active)
        keys_filepath = self.get("keys_filepath")
        if JsonManager.exists(keys_filepath):
            published = JsonManager.load(keys_filepath) or []
            if not isinstance(published, list):
                raise ValueError(f"Key registry {keys_filepath} must be a list")
            for entry in published:
                if (
                    active is not None
                    and isinstance(entry, dict)
                    and entry.get("key_id") == active.key_id
                ):
                    continue
                keys.append(SigningKey.from_parameter(entry))
        return KeyRegistry(keys)

    def _active_key(self) -> Optional[SigningKey]:
        public_key = self.get("public_key")
        if not public_key:
            try:
                public_key = self.signer().public_key_hex()
            except SigningError as exc:
                Logger.warning(f"Active signing key cannot be published: {exc}")
                return None
        return SigningKey.from_parameter(
            {
                "key_id": self.get("public_key_id"),
                "public_key": public_key.strip(),
                "valid_from": self.get("public_key_valid_from"),
                "valid_until": self.get("public_key_valid_until"),
            }
        )
