"""Centralized path constants for Sticky Notes."""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]

# Per-user data directory (override with STICKY_NOTES_DATA_DIR)
_DATA_DIR_ENV = os.environ.get("STICKY_NOTES_DATA_DIR")
USER_DATA_DIR = Path(_DATA_DIR_ENV).expanduser() if _DATA_DIR_ENV else (Path.home() / ".sticky_notes")

# Persisted notes
NOTES_FILE = USER_DATA_DIR / "notes.json"

# Optional key = value settings
CONFIG_PATH = USER_DATA_DIR / "config.txt"

# Logging
LOGS_DIR = USER_DATA_DIR / "logs"
APP_LOG_FILE = LOGS_DIR / "sticky_notes.log"


def ensure_directories() -> None:
    """Create necessary directories if they don't exist."""

    USER_DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)


__all__ = [
    'PACKAGE_ROOT',
    'USER_DATA_DIR',
    'NOTES_FILE',
    'CONFIG_PATH',
    'LOGS_DIR',
    'APP_LOG_FILE',
    'ensure_directories',
]
