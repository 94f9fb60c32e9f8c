"""
Screen work area and note placement.

New notes (and notes whose stored geometry is unusable) are placed with
their horizontal centre at 65% of the work-area width and vertically
centred. Notes with a usable position that drifted off-screen are only
clamped back inside, never re-centred.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from sticky_notes.core.logging_utils import get_module_logger

logger = get_module_logger("Screen")

DEFAULT_SCREEN_SIZE = (1920, 1080)
TASKBAR_HEIGHT = 40  # Estimated taskbar/menu height

DEFAULT_NOTE_WIDTH = 320.0
DEFAULT_NOTE_HEIGHT = 280.0
MIN_NOTE_WIDTH = 260.0
MIN_NOTE_HEIGHT = 150.0
HORIZONTAL_ANCHOR = 0.65


@dataclass(frozen=True)
class ScreenBounds:
    """Available (work-area) rectangle in logical units."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, left: float, top: float, width: float, height: float) -> bool:
        return (
            left >= self.left
            and top >= self.top
            and left + width <= self.right
            and top + height <= self.bottom
        )

    @staticmethod
    def from_size_string(value: str) -> Optional['ScreenBounds']:
        """Parse ``WIDTHxHEIGHT`` (e.g. ``1920x1040``) into bounds at the origin."""
        try:
            width_str, height_str = value.lower().split('x', 1)
            width, height = float(width_str), float(height_str)
        except (AttributeError, ValueError) as e:
            logger.warning("Failed to parse screen size '%s': %s", value, e)
            return None
        if width <= 0 or height <= 0:
            logger.warning("Ignoring non-positive screen size '%s'", value)
            return None
        return ScreenBounds(0.0, 0.0, width, height)


@dataclass
class NoteGeometry:
    left: float
    top: float
    width: float
    height: float


def _get_screen_resolution() -> Tuple[int, int]:
    try:
        import tkinter as tk

        root = tk.Tk()
        root.withdraw()
        width = root.winfo_screenwidth()
        height = root.winfo_screenheight()
        root.destroy()
        return width, height
    except Exception as e:
        logger.warning(
            "Failed to detect screen resolution: %s. Using default %dx%d",
            e, *DEFAULT_SCREEN_SIZE,
        )
        return DEFAULT_SCREEN_SIZE


def detect_work_area() -> ScreenBounds:
    """Probe the primary screen and subtract the taskbar strip."""
    width, height = _get_screen_resolution()
    bounds = ScreenBounds(0.0, 0.0, float(width), float(max(1, height - TASKBAR_HEIGHT)))
    logger.info("Work area: %dx%d", bounds.width, bounds.height)
    return bounds


def _usable(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


class PlacementPolicy:
    """Computes and repairs on-screen note positions."""

    def __init__(
        self,
        bounds: ScreenBounds,
        *,
        horizontal_anchor: float = HORIZONTAL_ANCHOR,
        default_width: float = DEFAULT_NOTE_WIDTH,
        default_height: float = DEFAULT_NOTE_HEIGHT,
        min_width: float = MIN_NOTE_WIDTH,
        min_height: float = MIN_NOTE_HEIGHT,
    ) -> None:
        self.bounds = bounds
        self.horizontal_anchor = horizontal_anchor
        self.default_width = default_width
        self.default_height = default_height
        self.min_width = min_width
        self.min_height = min_height

    def _fit_axis(self, start: float, size: float, lower: float, extent: float) -> float:
        if size >= extent:
            return lower
        return min(max(start, lower), lower + extent - size)

    def clamp(self, left: float, top: float, width: float, height: float) -> Tuple[float, float]:
        """Move a note the minimum distance needed to lie fully inside the work area."""
        b = self.bounds
        return (
            self._fit_axis(left, width, b.left, b.width),
            self._fit_axis(top, height, b.top, b.height),
        )

    def place(self, width: float, height: float) -> Tuple[float, float]:
        """Preferred position for a note of the given size."""
        b = self.bounds
        left = b.left + b.width * self.horizontal_anchor - width / 2
        top = b.top + (b.height - height) / 2
        return self.clamp(left, top, width, height)

    def repair_size(self, width: float, height: float) -> Tuple[float, float]:
        """Replace unusable sizes with defaults and raise small ones to the minimum."""
        if not _usable(width) or width <= 0:
            width = self.default_width
        if not _usable(height) or height <= 0:
            height = self.default_height
        return max(width, self.min_width), max(height, self.min_height)

    def repair(self, left: float, top: float, width: float, height: float) -> NoteGeometry:
        width, height = self.repair_size(width, height)
        if not _usable(left) or not _usable(top):
            left, top = self.place(width, height)
        else:
            left, top = self.clamp(left, top, width, height)
        return NoteGeometry(left=left, top=top, width=width, height=height)

    def new_geometry(self) -> NoteGeometry:
        left, top = self.place(self.default_width, self.default_height)
        return NoteGeometry(left=left, top=top, width=self.default_width, height=self.default_height)


__all__ = [
    "DEFAULT_NOTE_HEIGHT",
    "DEFAULT_NOTE_WIDTH",
    "MIN_NOTE_HEIGHT",
    "MIN_NOTE_WIDTH",
    "NoteGeometry",
    "PlacementPolicy",
    "ScreenBounds",
    "detect_work_area",
]
