"""Unit tests for the status command-line entry point."""

# pylint: disable=redefined-outer-name

import json
from unittest.mock import patch

import pytest  # type: ignore

from src.oracle.status_cli import StatusCli
from tests.conftest import TEST_PUBLIC_HEX, TEST_SEED_HEX


@pytest.fixture
def seeded_env(monkeypatch):
    """Point the CLI at the shipped config with the RFC 8032 test key."""
    monkeypatch.delenv("ORACLE_HOME", raising=False)
    monkeypatch.delenv("ED25519_PUBLIC_KEY", raising=False)
    monkeypatch.setenv("ED25519_PRIVATE_KEY", TEST_SEED_HEX)
    monkeypatch.setenv("PUBLIC_KEY_ID", "key_cli_v1")


def _run(capsys, *argv):
    code = StatusCli.run(list(argv))
    return code, json.loads(capsys.readouterr().out)


def test_default_prints_signed_receipt(seeded_env, capsys):
    """Without options the CLI prints a receipt for the default market."""
    code, body = _run(capsys)
    if code != 0:
        raise AssertionError(f"Expected exit code 0, got {code}")
    if body["mic"] != "XNYS" or body["signing_key_id"] != "key_cli_v1":
        raise AssertionError(f"Unexpected receipt: {body}")
    if len(body["signature"]) != 128:
        raise AssertionError("Expected a hex Ed25519 signature")


def test_exchanges_and_keys(seeded_env, capsys):
    """Directory and key registry are printed as JSON."""
    code, body = _run(capsys, "--exchanges")
    if code != 0 or len(body["exchanges"]) != 7:
        raise AssertionError(f"Unexpected directory output: {body}")
    code, body = _run(capsys, "--keys")
    if code != 0 or body["keys"][0]["public_key"] != TEST_PUBLIC_HEX:
        raise AssertionError(f"Unexpected keys output: {body}")


def test_schedule_option(seeded_env, capsys):
    """The schedule of the given market is printed."""
    code, body = _run(capsys, "xhkg", "--schedule")
    if code != 0 or body["mic"] != "XHKG":
        raise AssertionError(f"Unexpected schedule output: {body}")
    if body["lunch_break"] != {"start": "12:00", "end": "13:00"}:
        raise AssertionError("Expected the Hong Kong lunch break")


def test_unknown_mic_exit_code(seeded_env, capsys):
    """Error responses are printed and signaled through the exit code."""
    code, body = _run(capsys, "XXXX")
    if code != 1 or body["error"] != "UNKNOWN_MIC":
        raise AssertionError(f"Unexpected output: {code} {body}")


@patch("src.utils.io.logger.Logger.error")
def test_health_without_key(mock_error, monkeypatch, capsys):
    """With no key the health check prints the critical failure."""
    monkeypatch.delenv("ORACLE_HOME", raising=False)
    monkeypatch.delenv("ED25519_PRIVATE_KEY", raising=False)
    monkeypatch.delenv("ED25519_PUBLIC_KEY", raising=False)
    with patch("src.utils.io.logger.Logger.warning"):
        code, body = _run(capsys, "--health")
    if code != 1 or body["error"] != "CRITICAL_FAILURE":
        raise AssertionError(f"Unexpected output: {code} {body}")
    if not mock_error.called:
        raise AssertionError("Expected the liveness failure to be logged")


@patch("src.utils.io.logger.Logger.error")
def test_invalid_calendar_exit_code(mock_error, monkeypatch, tmp_path):
    """A broken calendar stops the CLI before any request."""
    monkeypatch.setenv("ORACLE_HOME", str(tmp_path))
    if StatusCli.run([]) != 2:
        raise AssertionError("Expected exit code 2")
    if "Cannot start oracle" not in mock_error.call_args[0][0]:
        raise AssertionError("Expected a start-up error log")


def test_options_are_exclusive(seeded_env):
    """Only one view can be requested at a time."""
    with pytest.raises(SystemExit):
        StatusCli.run(["--keys", "--health"])
