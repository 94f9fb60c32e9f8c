"""Durable note record and its JSON wire format."""

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

from sticky_notes.core.screen import DEFAULT_NOTE_HEIGHT, DEFAULT_NOTE_WIDTH

DEFAULT_COLOR = "#FFFAD46C"  # yellow

# Palette offered to the presentation layer.
COLOR_OPTIONS = (
    "#FFFAD46C",  # yellow
    "#FFE8FFB5",  # green
    "#FFD7E3FC",  # blue
    "#FFFFC0CB",  # pink
    "#FFEAC1FF",  # purple
)

_TIMESPAN_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{2}):(?P<seconds>\d{2})"
    r"(?:\.(?P<fraction>\d{1,7}))?$"
)
_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<fraction>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})?$"
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Time span / timestamp encoding
# ---------------------------------------------------------------------------


def format_timespan(value: timedelta) -> str:
    """Encode as ``[-][d.]hh:mm:ss[.fffffff]`` (seven fractional digits)."""
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    total_seconds, micros = divmod(total_us, 1_000_000)
    days, rem = divmod(total_seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)

    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        text = f"{days}.{text}"
    if micros:
        text = f"{text}.{micros * 10:07d}"
    return sign + text


def parse_timespan(value: Any) -> timedelta:
    """Decode a time span written by format_timespan() or given as seconds."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid time span: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"Invalid time span: {value!r}")
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time span: {value!r}")

    match = _TIMESPAN_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time span: {value!r}")

    fraction = match.group("fraction") or ""
    ticks = int(fraction.ljust(7, "0")) if fraction else 0
    span = timedelta(
        days=int(match.group("days") or 0),
        hours=int(match.group("hours")),
        minutes=int(match.group("minutes")),
        seconds=int(match.group("seconds")),
        microseconds=ticks // 10,
    )
    return -span if match.group("sign") else span


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text = f"{text}.{value.microsecond:06d}"
    return text + "Z"


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")
    match = _TIMESTAMP_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid timestamp: {value!r}")

    base = datetime.strptime(match.group("base"), "%Y-%m-%dT%H:%M:%S")
    fraction = match.group("fraction") or ""
    micros = int(fraction[:6].ljust(6, "0")) if fraction else 0
    parsed = base.replace(microsecond=micros)

    tz = match.group("tz")
    if tz and tz != "Z":
        sign = -1 if tz[0] == "-" else 1
        hours, minutes = int(tz[1:3]), int(tz[4:6])
        offset = timezone(sign * timedelta(hours=hours, minutes=minutes))
        return parsed.replace(tzinfo=offset).astimezone(timezone.utc)
    return parsed.replace(tzinfo=timezone.utc)


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Field '{name}' must be a number, got {value!r}")
    return float(value)


def _as_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Field '{name}' must be true or false, got {value!r}")
    return value


def _non_negative(span: timedelta) -> timedelta:
    return span if span > timedelta(0) else timedelta(0)


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class NoteRecord:
    """Persisted state of one sticky note.

    ``content`` is rich-text markup and is stored untouched. ``remaining_time``
    of zero means the countdown is finished or was never started.
    """

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    content: str = ""
    color: str = DEFAULT_COLOR
    is_pinned: bool = False
    left: float = 50.0
    top: float = 50.0
    width: float = DEFAULT_NOTE_WIDTH
    height: float = DEFAULT_NOTE_HEIGHT
    duration: timedelta = field(default_factory=timedelta)
    remaining_time: timedelta = field(default_factory=timedelta)
    last_modified: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "content": self.content,
            "color": self.color,
            "isPinned": self.is_pinned,
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
            "duration": format_timespan(self.duration),
            "remainingTime": format_timespan(self.remaining_time),
            "lastModified": format_timestamp(self.last_modified),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NoteRecord":
        """Build a record from its wire form.

        Keys are matched case-insensitively so ``IsPinned`` and ``isPinned``
        both load. Missing fields take their defaults; malformed values raise
        ValueError.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Note entry must be an object, got {type(data).__name__}")
        fields = {str(key).lower(): value for key, value in data.items()}
        defaults = cls()

        raw_id = fields.get("id")
        note_id = uuid.UUID(str(raw_id)) if raw_id is not None else defaults.id

        content = fields.get("content")
        color = fields.get("color")
        duration = _non_negative(parse_timespan(fields["duration"])) if "duration" in fields else timedelta(0)
        remaining = (
            _non_negative(parse_timespan(fields["remainingtime"]))
            if "remainingtime" in fields
            else timedelta(0)
        )

        return cls(
            id=note_id,
            content=content if isinstance(content, str) else "",
            color=color if isinstance(color, str) and color else DEFAULT_COLOR,
            is_pinned=_as_bool(fields.get("ispinned", False), "isPinned"),
            left=_as_float(fields.get("left", defaults.left), "left"),
            top=_as_float(fields.get("top", defaults.top), "top"),
            width=_as_float(fields.get("width", defaults.width), "width"),
            height=_as_float(fields.get("height", defaults.height), "height"),
            duration=duration,
            remaining_time=min(remaining, duration),
            last_modified=(
                parse_timestamp(fields["lastmodified"])
                if "lastmodified" in fields
                else defaults.last_modified
            ),
        )


__all__ = [
    "COLOR_OPTIONS",
    "DEFAULT_COLOR",
    "NoteRecord",
    "format_timespan",
    "format_timestamp",
    "parse_timespan",
    "parse_timestamp",
    "utc_now",
]
