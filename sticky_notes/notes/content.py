"""Plain-text preview and readable foreground derived from note content and colour."""

from __future__ import annotations

import string
import xml.etree.ElementTree as ET
from enum import Enum
from typing import List, Optional, Tuple

from sticky_notes.core.logging_utils import get_module_logger

logger = get_module_logger("NoteContent")

LUMINANCE_THRESHOLD = 0.6

# Rich-text elements followed by a line break in the preview
_BLOCK_ELEMENTS = frozenset({
    "Paragraph",
    "List",
    "ListItem",
    "Section",
    "BlockUIContainer",
    "Table",
    "TableRow",
})


class Foreground(Enum):
    """Text colour choice that stays readable on a note background."""
    DARK_ON_LIGHT = "#FF000000"
    LIGHT_ON_DARK = "#FFFFFFFF"


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _keep(text: Optional[str]) -> bool:
    # Whitespace-only text spanning lines is markup indentation
    return bool(text) and not (text.isspace() and "\n" in text)


def _collect(element: ET.Element, parts: List[str]) -> None:
    name = _local_name(element.tag)
    if name == "LineBreak":
        parts.append("\n")
    if _keep(element.text):
        parts.append(element.text)
    for child in element:
        _collect(child, parts)
        if _keep(child.tail):
            parts.append(child.tail)
    if name in _BLOCK_ELEMENTS:
        parts.append("\n")


def extract_preview_text(content: Optional[str]) -> str:
    """Best-effort plain text of a note's content; never raises.

    Content that is not markup is returned as-is (stripped). Markup that
    fails to parse yields an empty string.
    """
    if not content:
        return ""
    try:
        stripped = content.strip()
        if not stripped.startswith("<"):
            return stripped
        root = ET.fromstring(stripped)
        parts: List[str] = []
        _collect(root, parts)
        return "".join(parts).strip()
    except Exception as e:
        logger.debug("Preview extraction failed: %s", e)
        return ""


def parse_color(value: str) -> Tuple[int, int, int, int]:
    """Parse ``#AARRGGBB``, ``#RRGGBB``, ``#ARGB`` or ``#RGB`` into (a, r, g, b)."""
    if not isinstance(value, str):
        raise ValueError(f"Colour must be a string, got {value!r}")
    text = value.strip()
    if not text.startswith("#"):
        raise ValueError(f"Colour must start with '#': {value!r}")
    digits = text[1:]
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) == 6:
        digits = "FF" + digits
    if len(digits) != 8 or any(ch not in string.hexdigits for ch in digits):
        raise ValueError(f"Unsupported colour format: {value!r}")
    channels = int(digits, 16)
    return (
        (channels >> 24) & 0xFF,
        (channels >> 16) & 0xFF,
        (channels >> 8) & 0xFF,
        channels & 0xFF,
    )


def luminance(value: str) -> float:
    """Perceptual luminance of a colour in [0, 1]; alpha is ignored."""
    _, r, g, b = parse_color(value)
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def readable_foreground(value: str) -> Foreground:
    try:
        lum = luminance(value)
    except ValueError as e:
        logger.debug("Colour parse failed for %r: %s", value, e)
        return Foreground.DARK_ON_LIGHT
    return Foreground.DARK_ON_LIGHT if lum > LUMINANCE_THRESHOLD else Foreground.LIGHT_ON_DARK


__all__ = [
    "Foreground",
    "LUMINANCE_THRESHOLD",
    "extract_preview_text",
    "luminance",
    "parse_color",
    "readable_foreground",
]
