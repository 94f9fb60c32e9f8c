"""Logging setup: one rotating log file per user, optional console echo.

The interactive shell owns stdout, so console logging goes to stderr.
Only handlers installed here are ever replaced; anything else attached to
the root logger (test capture, embedding applications) is left alone.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

from .paths import APP_LOG_FILE

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 500 * 1024  # 500 KB
LOG_BACKUPS = 2

_HANDLER_MARK = "_sticky_notes_handler"


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    return numeric


def installed_handlers() -> List[logging.Handler]:
    """Handlers on the root logger that configure_logging() put there."""
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_MARK, False)]


def _install(handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    setattr(handler, _HANDLER_MARK, True)
    logging.getLogger().addHandler(handler)


def configure_logging(
    level: Union[int, str] = "info",
    *,
    console: bool = False,
    log_file: Optional[Union[str, Path]] = APP_LOG_FILE,
    max_bytes: int = MAX_LOG_BYTES,
    backup_count: int = LOG_BACKUPS,
) -> Optional[Path]:
    """Install the application's log handlers, replacing any earlier ones.

    Args:
        level: Level name ("debug" ... "critical") or number.
        console: Echo records to stderr as well.
        log_file: Rotating log file; None disables it (console is then forced on).
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files kept next to the log.

    Returns:
        The log file path, or None when only the console is used.

    Raises:
        ValueError: ``level`` is not a known level name.
    """
    numeric_level = _coerce_level(level)
    root = logging.getLogger()

    for handler in installed_handlers():
        root.removeHandler(handler)
        handler.close()

    log_path = Path(log_file).expanduser() if log_file else None
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _install(
            RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"),
            numeric_level,
        )

    if console or log_path is None:
        _install(logging.StreamHandler(sys.stderr), numeric_level)

    root.setLevel(numeric_level)
    return log_path


__all__ = [
    "LOG_DATEFMT",
    "LOG_FORMAT",
    "configure_logging",
    "installed_handlers",
]
