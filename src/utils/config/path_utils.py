"""Path utilities module.

Resolves repository-relative resource paths (``config/markets.json`` and friends) against
``ORACLE_HOME`` when it is set, or the repository root otherwise.
"""

import os
import re
from pathlib import Path
from typing import List


class PathUtils:  # pylint: disable=too-few-public-methods
    """Utility class for building normalized file system paths."""

    _REPO_ROOT: Path = Path(__file__).resolve().parents[3]

    @staticmethod
    def home() -> str:
        """Return the base directory every relative resource path is resolved from."""
        oracle_home: str = os.getenv("ORACLE_HOME", "").strip()
        if len(oracle_home) > 0:
            return oracle_home
        return str(PathUtils._REPO_ROOT)

    @staticmethod
    def build(*segments: str) -> str:
        """Build a normalized path under :meth:`home`, splitting input segments on any separator."""
        parts: List[str] = []
        for segment in segments:
            if segment:
                parts.extend(p for p in re.split(r"[\\/]", segment) if p.strip())
        return os.path.join(PathUtils.home(), *parts)
