"""Module for reading the JSON documents the oracle is configured from."""

import json
import os
from typing import Any, Optional

from src.utils.io.logger import Logger


class JsonManager:
    """Class for handling JSON file operations."""

    @staticmethod
    def exists(filepath: str) -> bool:
        """Check if a file exists at the given path."""
        return os.path.exists(filepath)

    @staticmethod
    def load(filepath: Optional[str]) -> Any:
        """Load JSON data from a file, returning ``None`` when it is missing or unreadable."""
        if not filepath or not filepath.strip():
            Logger.error("filepath is empty")
            return None
        if not JsonManager.exists(filepath):
            Logger.warning(f"File not found: {filepath}")
            return None
        try:
            with open(filepath, "r", encoding="utf-8") as file:
                return json.load(file)
        except (OSError, TypeError, json.JSONDecodeError) as e:
            Logger.error(f"Error loading JSON file {filepath}: {e}")
            return None

    @staticmethod
    def load_strict(filepath: str) -> Any:
        """Load JSON data from a file, raising instead of returning ``None``.

        Used for documents the process cannot start without (the market calendar).
        """
        if not JsonManager.exists(filepath):
            raise FileNotFoundError(f"File not found: {filepath}")
        with open(filepath, "r", encoding="utf-8") as file:
            return json.load(file)
