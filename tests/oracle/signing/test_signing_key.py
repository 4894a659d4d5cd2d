"""Unit tests for SigningKey and KeyRegistry."""

import pytest  # type: ignore

from src.oracle.signing.signing_key import KeyRegistry, SigningKey
from tests.conftest import TEST_PUBLIC_HEX, utc


def _key(key_id="key_2026_v1", valid_until=None):
    return SigningKey.from_parameter(
        {
            "key_id": key_id,
            "public_key": TEST_PUBLIC_HEX,
            "valid_from": "2026-01-01T00:00:00Z",
            "valid_until": valid_until,
        }
    )


def test_validity_window_is_half_open():
    """A key is valid from its start up to, but not at, its end."""
    key = _key(valid_until="2027-01-01T00:00:00Z")
    if key.is_valid_at(utc(2025, 12, 31, 23, 59)):
        raise AssertionError("Key must not be valid before valid_from")
    if not key.is_valid_at(utc(2026, 1, 1)):
        raise AssertionError("Key must be valid at valid_from")
    if key.is_valid_at(utc(2027, 1, 1)):
        raise AssertionError("Key must not be valid at valid_until")
    if not _key().is_valid_at(utc(2030, 1, 1)):
        raise AssertionError("Key without valid_until never expires")


def test_to_json():
    """Keys publish their id, algorithm, format and window."""
    if _key().to_json() != {
        "key_id": "key_2026_v1",
        "algorithm": "Ed25519",
        "format": "hex",
        "public_key": TEST_PUBLIC_HEX,
        "valid_from": "2026-01-01T00:00:00.000Z",
        "valid_until": None,
    }:
        raise AssertionError(f"Unexpected key JSON: {_key().to_json()}")


@pytest.mark.parametrize(
    "entry",
    [
        None,
        {"key_id": "k", "public_key": TEST_PUBLIC_HEX},
        {"key_id": "k", "public_key": TEST_PUBLIC_HEX, "valid_from": "soon"},
        {"key_id": "", "public_key": TEST_PUBLIC_HEX, "valid_from": "2026-01-01"},
        {
            "key_id": "k",
            "public_key": TEST_PUBLIC_HEX,
            "valid_from": "2026-01-01",
            "valid_until": "2025-01-01",
        },
    ],
)
def test_from_parameter_rejects_invalid(entry):
    """Entries without a usable id or window are rejected."""
    with pytest.raises(ValueError):
        SigningKey.from_parameter(entry)


def test_registry_rotation_overlap():
    """During a rotation both keys are valid and selectable by id."""
    old = _key("key_2026_v1", valid_until="2026-07-01T00:00:00Z")
    new = SigningKey.from_parameter(
        {"key_id": "key_2026_v2", "public_key": "ab" * 32, "valid_from": "2026-06-01T00:00:00Z"}
    )
    registry = KeyRegistry([old, new])
    if [k.key_id for k in registry.valid_at(utc(2026, 6, 15))] != ["key_2026_v1", "key_2026_v2"]:
        raise AssertionError("Both keys should be valid during the overlap")
    if [k.key_id for k in registry.valid_at(utc(2026, 8, 1))] != ["key_2026_v2"]:
        raise AssertionError("Only the new key should be valid after rotation")
    if registry.find("key_2026_v2") is not new or registry.find("nope") is not None:
        raise AssertionError("Unexpected lookup result")
    document = registry.to_json()
    if len(document["keys"]) != 2:
        raise AssertionError("Registry should publish both keys")
    if document["canonical_payload_spec"]["key_order"] != "lexicographic":
        raise AssertionError("Registry should describe the canonical payload")


def test_registry_rejects_duplicates():
    """A key id can only be published once."""
    with pytest.raises(ValueError, match="Duplicated signing key id"):
        KeyRegistry([_key(), _key()])
