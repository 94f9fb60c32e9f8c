"""Typed configuration for the notes collection and application."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping

from sticky_notes.core.config_manager import get_config_manager
from sticky_notes.core.logging_utils import get_module_logger
from sticky_notes.core.paths import NOTES_FILE
from sticky_notes.core.screen import (
    DEFAULT_NOTE_HEIGHT,
    DEFAULT_NOTE_WIDTH,
    HORIZONTAL_ANCHOR,
    MIN_NOTE_HEIGHT,
    MIN_NOTE_WIDTH,
)

logger = get_module_logger("NotesConfig")

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass(slots=True)
class NotesConfig:
    """Typed configuration for sticky notes."""

    # Storage
    notes_file: Path = field(default_factory=lambda: NOTES_FILE)
    autosave_delay_ms: int = 300

    # Timer
    tick_interval_s: float = 1.0
    duration_step_minutes: int = 5

    # Geometry
    default_width: float = DEFAULT_NOTE_WIDTH
    default_height: float = DEFAULT_NOTE_HEIGHT
    min_width: float = MIN_NOTE_WIDTH
    min_height: float = MIN_NOTE_HEIGHT
    horizontal_anchor: float = HORIZONTAL_ANCHOR

    # Logging
    log_level: str = "info"
    console_output: bool = False

    @property
    def autosave_delay_s(self) -> float:
        return self.autosave_delay_ms / 1000.0

    @classmethod
    def from_config(cls, config: Mapping[str, str], args: Any = None) -> "NotesConfig":
        """Build config from ``key = value`` settings with optional CLI overrides."""
        cm = get_config_manager()
        defaults = cls()
        values = dict(config)

        notes_file = cm.get_str(values, "notes_file", "")
        result = cls(
            notes_file=Path(notes_file).expanduser() if notes_file else defaults.notes_file,
            autosave_delay_ms=cm.get_int(values, "autosave_delay_ms", defaults.autosave_delay_ms),
            tick_interval_s=cm.get_float(values, "tick_interval_s", defaults.tick_interval_s),
            duration_step_minutes=cm.get_int(values, "duration_step_minutes", defaults.duration_step_minutes),
            default_width=cm.get_float(values, "default_width", defaults.default_width),
            default_height=cm.get_float(values, "default_height", defaults.default_height),
            min_width=cm.get_float(values, "min_width", defaults.min_width),
            min_height=cm.get_float(values, "min_height", defaults.min_height),
            horizontal_anchor=cm.get_float(values, "horizontal_anchor", defaults.horizontal_anchor),
            log_level=cm.get_str(values, "log_level", defaults.log_level).lower(),
            console_output=cm.get_bool(values, "console_output", defaults.console_output),
        )

        if args is not None:
            result = result._apply_args_override(args)

        return result._validated()

    def _apply_args_override(self, args: Any) -> "NotesConfig":
        """Apply CLI argument overrides to config values."""
        values = asdict(self)

        arg_mappings = {
            "notes_file": "notes_file",
            "log_level": "log_level",
            "console_output": "console_output",
        }

        for arg_name, config_key in arg_mappings.items():
            if hasattr(args, arg_name):
                val = getattr(args, arg_name)
                if val is not None:
                    values[config_key] = val

        values["notes_file"] = Path(values["notes_file"]).expanduser()
        return NotesConfig(**values)

    def _validated(self) -> "NotesConfig":
        """Replace out-of-range values with their defaults."""
        defaults = NotesConfig()
        values = asdict(self)

        checks = {
            "autosave_delay_ms": lambda v: v >= 0,
            "tick_interval_s": lambda v: v > 0,
            "duration_step_minutes": lambda v: v > 0,
            "default_width": lambda v: v > 0,
            "default_height": lambda v: v > 0,
            "min_width": lambda v: v > 0,
            "min_height": lambda v: v > 0,
            "horizontal_anchor": lambda v: 0.0 <= v <= 1.0,
            "log_level": lambda v: v in LOG_LEVELS,
        }
        for key, is_valid in checks.items():
            if not is_valid(values[key]):
                logger.warning(
                    "Invalid %s value %r, using default %r", key, values[key], getattr(defaults, key)
                )
                values[key] = getattr(defaults, key)

        return NotesConfig(**values)

    def to_dict(self) -> dict[str, Any]:
        """Export config values as dictionary."""
        return asdict(self)


__all__ = ["LOG_LEVELS", "NotesConfig"]
