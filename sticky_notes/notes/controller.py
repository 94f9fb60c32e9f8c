"""
Note Controller - per-note behaviour, timer and focus session.

Focus session states:
- IDLE:   no session; the primary action starts one (needs duration > 0)
- ACTIVE: counting down; the primary action pauses
- PAUSED: countdown held; only resume or reset are available

Timer completion (remaining time reaches zero) always stops the timer,
unpins the note and returns the session to IDLE.

All mutation happens on the UI loop. The controller never sleeps; it asks
the injected Scheduler to call it back one tick later.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional
from uuid import UUID

from sticky_notes.core.logging_utils import get_module_logger
from sticky_notes.core.scheduler import ScheduledHandle, Scheduler, cancel_quietly
from sticky_notes.core.screen import MIN_NOTE_HEIGHT, MIN_NOTE_WIDTH
from sticky_notes.notes.commands import NoteCommand
from sticky_notes.notes.content import Foreground, extract_preview_text, readable_foreground
from sticky_notes.notes.model import COLOR_OPTIONS, NoteRecord, utc_now

TICK = timedelta(seconds=1)
DEFAULT_DURATION_STEP = 5

PLAY_ICON = "M2,2 L12,8 L2,14 Z"
PAUSE_ICON = "M2,2 H5 V14 H2 Z M9,2 H12 V14 H9 Z"

# Properties written to storage; changes to these schedule an autosave
PERSISTED_PROPERTIES = frozenset({
    "content",
    "color",
    "is_pinned",
    "left",
    "top",
    "width",
    "height",
    "duration",
    "remaining_time",
    "last_modified",
})


class FocusState(Enum):
    """States of a focus session."""
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"


@dataclass
class FocusUIState:
    """UI representation of the focus session."""
    button_text: str            # "Focus", "Pause" or "Resume"
    button_icon: str            # Play or pause glyph path
    show_paused_controls: bool

    @classmethod
    def from_state(cls, state: FocusState) -> 'FocusUIState':
        if state == FocusState.ACTIVE:
            return cls(button_text="Pause", button_icon=PAUSE_ICON, show_paused_controls=False)
        if state == FocusState.PAUSED:
            return cls(button_text="Resume", button_icon=PLAY_ICON, show_paused_controls=True)
        return cls(button_text="Focus", button_icon=PLAY_ICON, show_paused_controls=False)


@dataclass(frozen=True)
class PropertyChange:
    """Change notification raised by a NoteController."""
    note_id: UUID
    name: str
    persisted: bool


ChangeListener = Callable[[PropertyChange], None]


class NoteController:
    """Wraps one NoteRecord and exposes its behaviour to the presentation layer."""

    COLOR_OPTIONS = COLOR_OPTIONS

    def __init__(
        self,
        record: NoteRecord,
        *,
        scheduler: Scheduler,
        clock: Callable[[], datetime] = utc_now,
        tick_interval: float = 1.0,
        duration_step: float = DEFAULT_DURATION_STEP,
        min_width: float = MIN_NOTE_WIDTH,
        min_height: float = MIN_NOTE_HEIGHT,
    ):
        self.logger = get_module_logger("NoteController")
        self._record = record
        self._scheduler = scheduler
        self._clock = clock
        self._tick_interval = tick_interval
        self._duration_step = duration_step
        self._min_width = min_width
        self._min_height = min_height

        # Transient state, never persisted
        self._is_timer_running = False
        self._is_focus_active = False
        self._is_focus_paused = False
        self._tick_handle: Optional[ScheduledHandle] = None
        self._focus_foreground = readable_foreground(record.color)

        self._listeners: List[ChangeListener] = []

        self.pin_command = NoteCommand("pin", self.toggle_pin)
        self.start_timer_command = NoteCommand(
            "start", self.start_timer,
            lambda: not self._is_timer_running and self.duration > timedelta(0),
        )
        self.pause_timer_command = NoteCommand("pause", self.pause_timer, lambda: self._is_timer_running)
        self.reset_timer_command = NoteCommand("reset", self.reset_timer, lambda: self.duration > timedelta(0))
        self.increase_duration_command = NoteCommand(
            "more", lambda: self.adjust_duration_minutes(self._duration_step),
        )
        self.decrease_duration_command = NoteCommand(
            "less", lambda: self.adjust_duration_minutes(-self._duration_step),
            lambda: self.duration > timedelta(0),
        )
        self.focus_command = NoteCommand("focus", self.focus_primary, self.can_focus_primary)
        self.resume_focus_command = NoteCommand(
            "resume", self.resume_focus,
            lambda: self._is_focus_paused and self._record.duration > timedelta(0),
        )
        self.reset_focus_command = NoteCommand("endfocus", self.reset_focus, lambda: self._is_focus_active)

    # =========================================================================
    # Observation
    # =========================================================================

    def subscribe(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self, *names: str) -> None:
        for name in names:
            change = PropertyChange(self._record.id, name, name in PERSISTED_PROPERTIES)
            for listener in list(self._listeners):
                try:
                    listener(change)
                except Exception as e:
                    self.logger.error("Change listener failed for %s: %s", name, e, exc_info=True)

    def _touch(self) -> None:
        self._record.last_modified = self._clock()
        self._notify("last_modified")

    # =========================================================================
    # Record fields
    # =========================================================================

    @property
    def record(self) -> NoteRecord:
        return self._record

    @property
    def id(self) -> UUID:
        return self._record.id

    @property
    def content(self) -> str:
        return self._record.content

    @property
    def color(self) -> str:
        return self._record.color

    @property
    def is_pinned(self) -> bool:
        return self._record.is_pinned

    @property
    def left(self) -> float:
        return self._record.left

    @property
    def top(self) -> float:
        return self._record.top

    @property
    def width(self) -> float:
        return self._record.width

    @property
    def height(self) -> float:
        return self._record.height

    @property
    def duration(self) -> timedelta:
        return self._record.duration

    @property
    def remaining_time(self) -> timedelta:
        return self._record.remaining_time

    @property
    def last_modified(self) -> datetime:
        return self._record.last_modified

    def set_content(self, text: str) -> None:
        text = text or ""
        if text == self._record.content:
            return
        self._record.content = text
        self._notify("content", "preview_text")
        self._touch()

    def set_color(self, color: str) -> None:
        if not color or color == self._record.color:
            return
        self._record.color = color
        self._notify("color")
        self._update_focus_foreground()
        self._touch()

    def set_pinned(self, pinned: bool) -> None:
        pinned = bool(pinned)
        if pinned == self._record.is_pinned:
            return
        self._record.is_pinned = pinned
        self._notify("is_pinned")
        self._touch()

    def toggle_pin(self) -> None:
        self.set_pinned(not self._record.is_pinned)

    def set_geometry(self, left: float, top: float, width: float, height: float) -> None:
        """Move and/or resize; sizes below the minimum are raised to it.

        Non-finite values leave the corresponding field unchanged.
        """
        updates = {
            "left": left,
            "top": top,
            "width": max(width, self._min_width) if math.isfinite(width) else None,
            "height": max(height, self._min_height) if math.isfinite(height) else None,
        }
        changed = []
        for name, value in updates.items():
            if value is None or not math.isfinite(value):
                continue
            value = float(value)
            if value != getattr(self._record, name):
                setattr(self._record, name, value)
                changed.append(name)
        if changed:
            self._notify(*changed)
            self._touch()

    # =========================================================================
    # Duration
    # =========================================================================

    @property
    def duration_minutes(self) -> float:
        return round(self._record.duration.total_seconds() / 60, 2)

    def _set_duration(self, duration: timedelta) -> None:
        if duration == self._record.duration:
            return
        self._record.duration = duration
        self._record.remaining_time = duration
        self._notify("duration", "duration_minutes", "remaining_time", "remaining_display")
        self._touch()

    def set_duration_minutes(self, minutes: float) -> None:
        """Set the timer length; any change also resets the remaining time."""
        if not math.isfinite(minutes):
            self.logger.warning("Ignoring non-finite duration: %s", minutes)
            return
        self._set_duration_from_minutes(minutes)

    def adjust_duration_minutes(self, delta: float) -> None:
        if not math.isfinite(delta):
            self.logger.warning("Ignoring non-finite duration change: %s", delta)
            return
        current = self._record.duration.total_seconds() / 60
        self._set_duration_from_minutes(current + delta)

    def _set_duration_from_minutes(self, minutes: float) -> None:
        try:
            duration = timedelta(minutes=max(0.0, minutes))
        except OverflowError:
            self.logger.warning("Ignoring out-of-range duration: %s minutes", minutes)
            return
        self._set_duration(duration)

    def _set_remaining(self, remaining: timedelta) -> None:
        if remaining == self._record.remaining_time:
            return
        self._record.remaining_time = remaining
        self._notify("remaining_time", "remaining_display")

    @property
    def remaining_display(self) -> str:
        """Remaining time as ``MM:SS``, or ``H:MM:SS`` from one hour up."""
        total = int(self._record.remaining_time.total_seconds())
        hours, rem = divmod(total, 3600)
        minutes, seconds = divmod(rem, 60)
        if hours:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"

    # =========================================================================
    # Timer
    # =========================================================================

    @property
    def is_timer_running(self) -> bool:
        return self._is_timer_running

    def start_timer(self) -> None:
        if self._is_timer_running or self._record.duration <= timedelta(0):
            return
        self._is_timer_running = True
        self._schedule_tick()
        self.logger.debug("Timer started for %s (%s left)", self.id, self.remaining_display)
        self._notify("is_timer_running")

    def pause_timer(self) -> None:
        if not self._is_timer_running:
            return
        self._is_timer_running = False
        cancel_quietly(self._tick_handle)
        self._tick_handle = None
        self.logger.debug("Timer paused for %s (%s left)", self.id, self.remaining_display)
        self._notify("is_timer_running")

    def reset_timer(self) -> None:
        self.pause_timer()
        self._set_remaining(self._record.duration)
        self._touch()

    def _schedule_tick(self) -> None:
        self._tick_handle = self._scheduler.call_later(self._tick_interval, self._on_tick)

    def _on_tick(self) -> None:
        self._tick_handle = None
        if not self._is_timer_running:
            return

        remaining = self._record.remaining_time - TICK
        if remaining > timedelta(0):
            self._set_remaining(remaining)
            self._schedule_tick()
            return

        self._complete()

    def _complete(self) -> None:
        self.logger.info("Timer finished for %s", self.id)
        self.pause_timer()
        self._set_remaining(timedelta(0))
        self.set_pinned(False)
        self._set_focus(active=False, paused=False)

    # =========================================================================
    # Focus session
    # =========================================================================

    @property
    def is_focus_active(self) -> bool:
        return self._is_focus_active

    @property
    def is_focus_paused(self) -> bool:
        return self._is_focus_paused

    @property
    def focus_state(self) -> FocusState:
        if not self._is_focus_active:
            return FocusState.IDLE
        return FocusState.PAUSED if self._is_focus_paused else FocusState.ACTIVE

    @property
    def focus_ui(self) -> FocusUIState:
        return FocusUIState.from_state(self.focus_state)

    @property
    def focus_button_text(self) -> str:
        return self.focus_ui.button_text

    @property
    def focus_button_icon(self) -> str:
        return self.focus_ui.button_icon

    @property
    def show_paused_controls(self) -> bool:
        return self._is_focus_paused

    def _set_focus(self, *, active: bool, paused: bool) -> None:
        if (active, paused) == (self._is_focus_active, self._is_focus_paused):
            return
        previous = self.focus_state
        self._is_focus_active = active
        self._is_focus_paused = paused
        self.logger.debug("Focus %s: %s -> %s", self.id, previous.value, self.focus_state.value)
        self._notify(
            "is_focus_active",
            "is_focus_paused",
            "focus_state",
            "focus_button_text",
            "focus_button_icon",
            "show_paused_controls",
        )

    def can_focus_primary(self) -> bool:
        if self._is_focus_paused:
            return False
        return True if self._is_focus_active else self._record.duration > timedelta(0)

    def focus_primary(self) -> None:
        """Start a session when idle, pause it when active; no-op when paused."""
        if not self._is_focus_active:
            if self._record.duration <= timedelta(0):
                return
            self.reset_timer()
            self._set_focus(active=True, paused=False)
            self.start_timer()
        elif not self._is_focus_paused:
            self.pause_timer()
            self._set_focus(active=True, paused=True)

    def resume_focus(self) -> None:
        """Continue a paused session; without a duration the session ends instead."""
        if not self._is_focus_paused:
            return
        self.start_timer()
        if not self._is_timer_running:
            self.logger.debug("Nothing to resume for %s, ending focus session", self.id)
            self._set_focus(active=False, paused=False)
            return
        self._set_focus(active=True, paused=False)

    def reset_focus(self) -> None:
        """Leave the session and restore the full duration."""
        if not self._is_focus_active:
            return
        self.pause_timer()
        self._set_remaining(self._record.duration)
        self._set_focus(active=False, paused=False)

    # =========================================================================
    # Derived display
    # =========================================================================

    @property
    def preview_text(self) -> str:
        return extract_preview_text(self._record.content)

    @property
    def focus_foreground(self) -> Foreground:
        return self._focus_foreground

    def _update_focus_foreground(self) -> None:
        foreground = readable_foreground(self._record.color)
        if foreground != self._focus_foreground:
            self._focus_foreground = foreground
            self._notify("focus_foreground")

    @property
    def commands(self) -> Dict[str, NoteCommand]:
        return {
            command.name: command
            for command in (
                self.pin_command,
                self.start_timer_command,
                self.pause_timer_command,
                self.reset_timer_command,
                self.increase_duration_command,
                self.decrease_duration_command,
                self.focus_command,
                self.resume_focus_command,
                self.reset_focus_command,
            )
        }

    def stop(self) -> None:
        """Cancel the pending tick without touching the record."""
        if self._is_timer_running:
            self.pause_timer()

    def __repr__(self) -> str:
        return (
            f"NoteController(id={self.id}, focus={self.focus_state.value}, "
            f"running={self._is_timer_running}, remaining={self.remaining_display})"
        )


__all__ = [
    "ChangeListener",
    "FocusState",
    "FocusUIState",
    "NoteController",
    "PERSISTED_PROPERTIES",
    "PropertyChange",
]
