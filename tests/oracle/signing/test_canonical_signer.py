"""Unit tests for CanonicalSigner: payload bytes, deterministic signatures and key parsing."""

import base64

import pytest  # type: ignore
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from src.oracle.errors import SigningError
from src.oracle.signing.canonical_signer import CanonicalSigner
from tests.conftest import TEST_KEY_ID, TEST_PUBLIC_HEX, TEST_SEED_HEX

FIELDS = {
    "status": "OPEN",
    "mic": "XNYS",
    "issued_at": "2026-03-04T15:00:00.000Z",
    "source": "SCHEDULE",
}


def _private_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.from_private_bytes(bytes.fromhex(TEST_SEED_HEX))


def test_canonical_payload_is_sorted_and_compact():
    """Keys are sorted and no whitespace separates tokens."""
    payload = CanonicalSigner.canonical_payload(FIELDS)
    expected = (
        b'{"issued_at":"2026-03-04T15:00:00.000Z","mic":"XNYS",'
        b'"source":"SCHEDULE","status":"OPEN"}'
    )
    if payload != expected:
        raise AssertionError(f"Unexpected payload: {payload!r}")


def test_canonical_payload_keeps_non_ascii_as_utf8():
    """Non-ASCII reasons are encoded as UTF-8 bytes, not escapes."""
    payload = CanonicalSigner.canonical_payload({"reason": "Börse geschlossen"})
    if payload != '{"reason":"Börse geschlossen"}'.encode("utf-8"):
        raise AssertionError(f"Unexpected payload: {payload!r}")


def test_canonical_payload_requires_strings():
    """Every signed field value must already be a string."""
    with pytest.raises(TypeError):
        CanonicalSigner.canonical_payload({"ttl": 60})  # type: ignore


def test_public_key_matches_seed(signer):
    """The derived public key is the one of the known test seed."""
    if signer.public_key_hex() != TEST_PUBLIC_HEX:
        raise AssertionError(f"Unexpected public key: {signer.public_key_hex()}")
    if signer.key_id != TEST_KEY_ID:
        raise AssertionError("Unexpected key id")


def test_signatures_are_deterministic_and_verifiable(signer):
    """Identical fields give identical signatures; any change is detected."""
    first = signer.sign(FIELDS)
    second = signer.sign(dict(reversed(list(FIELDS.items()))))
    if first != second:
        raise AssertionError("Signatures must not depend on insertion order")
    if len(first) != 128:
        raise AssertionError("Ed25519 signatures are 64 bytes, 128 hex characters")
    if not CanonicalSigner.verify(FIELDS, first, TEST_PUBLIC_HEX):
        raise AssertionError("Signature should verify")
    tampered = dict(FIELDS, status="CLOSED")
    if CanonicalSigner.verify(tampered, first, TEST_PUBLIC_HEX):
        raise AssertionError("Tampered fields must not verify")
    if CanonicalSigner.verify(FIELDS, "zz" * 64, TEST_PUBLIC_HEX):
        raise AssertionError("A malformed signature must not verify")


@pytest.mark.parametrize("secret", [None, "", "   "])
def test_missing_secret_raises_on_use(secret):
    """Construction succeeds; signing reports the missing key."""
    signer = CanonicalSigner(secret, TEST_KEY_ID)
    with pytest.raises(SigningError, match="Missing private key secret"):
        signer.sign(FIELDS)


@pytest.mark.parametrize("secret", ["not-a-key!!", base64.b64encode(b"garbage").decode()])
def test_corrupt_secret_raises(secret):
    """Unparseable secrets are reported as corrupt."""
    with pytest.raises(SigningError, match="corrupt"):
        CanonicalSigner(secret, TEST_KEY_ID).sign(FIELDS)


def test_pem_and_der_secrets_are_accepted():
    """PKCS#8 PEM and base64 DER forms sign like the raw seed."""
    pem = _private_key().private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    der = _private_key().private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    for secret in (pem.decode("ascii"), base64.b64encode(der).decode("ascii")):
        if CanonicalSigner(secret, TEST_KEY_ID).public_key_hex() != TEST_PUBLIC_HEX:
            raise AssertionError("Alternate secret formats must yield the same key")


def test_empty_key_id_raises():
    """Every signer needs a key identifier."""
    with pytest.raises(ValueError):
        CanonicalSigner(TEST_SEED_HEX, " ")
