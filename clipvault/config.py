"""
clipvault.config — Load, validate, and expose configuration.

Config lives in the clipvault home directory (``~/.clipvault`` unless
``CLIPVAULT_HOME`` says otherwise):

1. Built-in Pydantic defaults
2. ``<home>/config.yaml``
3. ``<home>/.env`` and environment variables (``CLIPVAULT_HISTORY_PATH``,
   ``CLIPVAULT_DEBOUNCE``, ``CLIPVAULT_MAX_ITEMS``, ``CLIPVAULT_LOG_LEVEL``)

Each layer overrides the previous one.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def clipvault_home() -> Path:
    """Return the per-user directory holding config and history."""
    override = os.getenv("CLIPVAULT_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".clipvault"


def config_path() -> Path:
    return clipvault_home() / "config.yaml"


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------


class HistorySettings(BaseModel):
    """Where and how the history document is saved."""

    path: str = ""                            # empty → <home>/history.json
    debounce_seconds: float = Field(default=1.5, gt=0)
    max_items: int = Field(default=100, ge=1)
    undo_timeout_seconds: float = Field(default=30.0, gt=0)

    def resolved_path(self) -> Path:
        if self.path:
            return Path(self.path).expanduser()
        return clipvault_home() / "history.json"

    def pinboards_path(self) -> Path:
        """Pinboards are kept beside the history document."""
        return self.resolved_path().with_name("pinboards.json")


class SearchSettings(BaseModel):
    default_limit: int = Field(default=20, ge=1)


class ClipvaultSettings(BaseModel):
    """Top-level settings object for the application."""

    version: int = 1
    log_level: str = "WARNING"

    history: HistorySettings = Field(default_factory=HistorySettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def _load_yaml(path: Path) -> dict[str, Any]:
    """Read and parse a YAML file.  Returns {} if not found."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


@lru_cache(maxsize=1)
def get_settings() -> ClipvaultSettings:
    """Return the validated, cached application settings."""
    home = clipvault_home()

    # 1. Load .env (if present) so env-vars are visible below
    load_dotenv(home / ".env")

    # 2. Parse YAML
    raw: dict[str, Any] = _load_yaml(home / "config.yaml")

    # 3. Overlay env-var overrides
    history = raw.setdefault("history", {})
    if history_path := os.getenv("CLIPVAULT_HISTORY_PATH"):
        history["path"] = history_path
    if debounce := os.getenv("CLIPVAULT_DEBOUNCE"):
        history["debounce_seconds"] = debounce
    if max_items := os.getenv("CLIPVAULT_MAX_ITEMS"):
        history["max_items"] = max_items
    if log_level := os.getenv("CLIPVAULT_LOG_LEVEL"):
        raw["log_level"] = log_level

    # 4. Validate through Pydantic
    return ClipvaultSettings(**raw)
