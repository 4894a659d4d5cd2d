"""Unit tests for the Logger facade."""

# pylint: disable=protected-access

import logging

from rich.logging import RichHandler

from src.utils.io.logger import SUCCESS_LEVEL, Logger


def test_logger_is_configured_once():
    """The named logger gets a single rich handler and does not propagate."""
    first = Logger._get()
    second = Logger._get()
    if first is not second:
        raise AssertionError("Expected the same logger instance")
    if first.name != "market_oracle" or first.propagate:
        raise AssertionError("Unexpected logger configuration")
    if len([h for h in first.handlers if isinstance(h, RichHandler)]) != 1:
        raise AssertionError("Expected exactly one RichHandler")


def test_levels_are_forwarded(monkeypatch):
    """Each helper logs at its own level."""
    records = []
    logger = Logger._get()
    original_level = logger.level
    monkeypatch.setattr(logger, "handle", records.append)
    logger.setLevel(logging.DEBUG)
    try:
        Logger.debug("d")
        Logger.info("i")
        Logger.success("s")
        Logger.warning("w")
        Logger.error("e")
        Logger.separator()
    finally:
        logger.setLevel(original_level)
    levels = [r.levelno for r in records]
    expected = [
        logging.DEBUG,
        logging.INFO,
        SUCCESS_LEVEL,
        logging.WARNING,
        logging.ERROR,
        logging.INFO,
    ]
    if levels != expected:
        raise AssertionError(f"Unexpected levels: {levels}")
    if records[-1].getMessage() != "-" * 60:
        raise AssertionError("Separator should be a dashed line")
    if logging.getLevelName(SUCCESS_LEVEL) != "SUCCESS":
        raise AssertionError("SUCCESS level should be registered")
