"""Centralized logging facade.

Every module logs through the static helpers of :class:`Logger` so that output format and
handlers are configured in one place. Console output is rendered with :mod:`rich`.
"""

import logging
import os
from typing import Optional

from rich.logging import RichHandler

SUCCESS_LEVEL = 25
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")


class Logger:
    """Static wrapper around a single named :class:`logging.Logger`."""

    _NAME = "market_oracle"
    _LEVEL = os.getenv("ORACLE_LOG_LEVEL", "INFO").upper()
    _SEPARATOR = "-" * 60
    _instance: Optional[logging.Logger] = None

    @staticmethod
    def _get() -> logging.Logger:
        if Logger._instance is None:
            logger = logging.getLogger(Logger._NAME)
            logger.setLevel(Logger._LEVEL)
            logger.propagate = False
            if not logger.handlers:
                handler = RichHandler(
                    show_time=True,
                    markup=False,
                    rich_tracebacks=True,
                    log_time_format="%Y-%m-%d %H:%M:%S",
                )
                handler.setFormatter(logging.Formatter("%(message)s"))
                logger.addHandler(handler)
            Logger._instance = logger
        return Logger._instance

    @staticmethod
    def debug(message: str) -> None:
        """Log a debug message."""
        Logger._get().debug(message)

    @staticmethod
    def info(message: str) -> None:
        """Log an informational message."""
        Logger._get().info(message)

    @staticmethod
    def success(message: str) -> None:
        """Log a message at the custom SUCCESS level."""
        Logger._get().log(SUCCESS_LEVEL, message)

    @staticmethod
    def warning(message: str) -> None:
        """Log a warning message."""
        Logger._get().warning(message)

    @staticmethod
    def error(message: str) -> None:
        """Log an error message."""
        Logger._get().error(message)

    @staticmethod
    def separator() -> None:
        """Log a visual separator line."""
        Logger._get().info(Logger._SEPARATOR)
