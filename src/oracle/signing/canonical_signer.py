"""Deterministic Ed25519 signing over a canonical JSON payload.

The canonical payload is part of the public contract: field names sorted lexicographically,
no whitespace between tokens, UTF-8 encoded. Any byte-level deviation breaks independent
verification, so :meth:`CanonicalSigner.canonical_payload` is the single place it is built.

Ed25519 signatures are deterministic: identical fields always yield the identical signature.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any, Dict, Mapping, Optional

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from src.oracle.errors import SigningError

CANONICAL_PAYLOAD_SPEC: Dict[str, Any] = {
    "algorithm": "Ed25519",
    "encoding": "UTF-8",
    "serialization": "JSON object of every receipt field except 'signature'",
    "key_order": "lexicographic",
    "separators": [",", ":"],
    "whitespace": "none",
    "signature_format": "hex",
}


class CanonicalSigner:
    """Signs field mappings with the oracle's private key.

    The secret is parsed on first use, so a missing or corrupt key shows up as a
    :class:`SigningError` at signing time rather than at start-up. Accepted secret formats:
    a 64-character hex seed, a PKCS#8 PEM document, or base64 PKCS#8 DER.
    """

    _HEX_SEED = re.compile(r"[0-9a-fA-F]{64}")

    def __init__(self, secret: Optional[str], key_id: str) -> None:
        if not isinstance(key_id, str) or len(key_id.strip()) == 0:
            raise ValueError("`key_id` must be a non-empty string")
        self._secret = secret
        self._key_id = key_id.strip()
        self._private_key: Optional[Ed25519PrivateKey] = None

    @property
    def key_id(self) -> str:
        """Return the identifier consumers select the public key by."""
        return self._key_id

    @staticmethod
    def canonical_payload(fields: Mapping[str, str]) -> bytes:
        """Return the exact bytes that are signed for *fields*."""
        for name, value in fields.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise TypeError("Signed fields must map `str` to `str`")
        return json.dumps(
            dict(fields), sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")

    def sign(self, fields: Mapping[str, str]) -> str:
        """Return the hex Ed25519 signature over the canonical payload of *fields*."""
        payload = CanonicalSigner.canonical_payload(fields)
        private_key = self._load_private_key()
        try:
            return private_key.sign(payload).hex()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise SigningError(f"Signing failed: {exc}") from exc

    def public_key_hex(self) -> str:
        """Return the raw public key matching the private key, hex encoded."""
        public = self._load_private_key().public_key()
        return public.public_bytes(
            encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
        ).hex()

    @staticmethod
    def verify(fields: Mapping[str, str], signature_hex: str, public_key_hex: str) -> bool:
        """Return ``True`` if *signature_hex* is valid for *fields* under *public_key_hex*."""
        try:
            public = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
            public.verify(
                bytes.fromhex(signature_hex), CanonicalSigner.canonical_payload(fields)
            )
        except (InvalidSignature, ValueError, TypeError):
            return False
        return True

    def _load_private_key(self) -> Ed25519PrivateKey:
        if self._private_key is None:
            self._private_key = CanonicalSigner._parse_secret(self._secret)
        return self._private_key

    @staticmethod
    def _parse_secret(secret: Optional[str]) -> Ed25519PrivateKey:
        if secret is None or len(secret.strip()) == 0:
            raise SigningError("Missing private key secret")
        text = secret.strip()
        try:
            if CanonicalSigner._HEX_SEED.fullmatch(text):
                return Ed25519PrivateKey.from_private_bytes(bytes.fromhex(text))
            if text.startswith("-----BEGIN"):
                key = serialization.load_pem_private_key(text.encode("ascii"), None)
            else:
                der = base64.b64decode(text, validate=True)
                key = serialization.load_der_private_key(der, None)
        except (ValueError, TypeError, binascii.Error, UnsupportedAlgorithm) as exc:
            raise SigningError(f"Private key secret is corrupt: {exc}") from exc
        if not isinstance(key, Ed25519PrivateKey):
            raise SigningError("Private key secret is not an Ed25519 key")
        return key
