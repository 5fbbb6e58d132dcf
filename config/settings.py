"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate()   # raises ValueError on a malformed setting
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

#: Relative, so it resolves against the working directory of each invocation.
DEFAULT_DATA_DIR = Path("data")
DEFAULT_SEARCH_URL = "https://openlibrary.org/search.json"


def _optional_float(name: str) -> Optional[float]:
    """Read *name* from the environment as a float, or ``None`` when unset."""
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else None


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── Storage ─────────────────────────────────────────────────────────────
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("BOOK_SEARCH_DATA_DIR", "") or DEFAULT_DATA_DIR
        )
    )

    # ── Search ──────────────────────────────────────────────────────────────
    search_url: str = field(
        default_factory=lambda: os.environ.get("OPENLIBRARY_SEARCH_URL", DEFAULT_SEARCH_URL)
    )
    #: Seconds before a search request gives up. ``None`` waits forever.
    request_timeout: Optional[float] = field(
        default_factory=lambda: _optional_float("REQUEST_TIMEOUT")
    )
    #: Raise on failed requests instead of returning an empty result.
    strict_search: bool = field(
        default_factory=lambda: os.environ.get("STRICT_SEARCH", "0") == "1"
    )

    # ── Logging ─────────────────────────────────────────────────────────────
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "WARNING").upper()
    )

    def validate(self) -> None:
        """Raise ``ValueError`` if any setting is unusable."""
        if not self.search_url.startswith(("http://", "https://")):
            raise ValueError(
                f"OPENLIBRARY_SEARCH_URL must be an http(s) URL, got {self.search_url!r}."
            )
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be a positive number of seconds.")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown LOG_LEVEL {self.log_level!r}.")
