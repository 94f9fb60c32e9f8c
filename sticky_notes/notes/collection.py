"""
Notes Collection - owns the note controllers and debounces persistence.

Every persisted-field change on any note re-arms a single debounce timer;
when it elapses without further edits the whole collection is written in
one save. Bursts of edits therefore coalesce into one write.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set
from uuid import UUID

from sticky_notes.core.asyncio_utils import create_logged_task
from sticky_notes.core.logging_utils import get_module_logger
from sticky_notes.core.scheduler import ScheduledHandle, Scheduler, cancel_quietly
from sticky_notes.core.screen import PlacementPolicy
from sticky_notes.notes.commands import NoteCommand
from sticky_notes.notes.config import NotesConfig
from sticky_notes.notes.controller import NoteController, PropertyChange
from sticky_notes.notes.model import NoteRecord, utc_now
from sticky_notes.notes.storage import NoteStorage, NoteStorageError


class CollectionEvent(Enum):
    NOTE_ADDED = "note_added"
    NOTE_REMOVED = "note_removed"
    SELECTION_CHANGED = "selection_changed"
    VISIBILITY_CHANGED = "visibility_changed"


@dataclass(frozen=True)
class CollectionChange:
    event: CollectionEvent
    note_id: Optional[UUID] = None


CollectionListener = Callable[[CollectionChange], None]
SaveFailureListener = Callable[[Exception], None]


class NotesCollection:
    """Ordered set of notes with selection, filtering and autosave."""

    def __init__(
        self,
        storage: NoteStorage,
        *,
        scheduler: Scheduler,
        placement: PlacementPolicy,
        config: Optional[NotesConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.logger = get_module_logger("NotesCollection")
        self._storage = storage
        self._scheduler = scheduler
        self._placement = placement
        self._config = config or NotesConfig()
        self._clock = clock

        self._notes: List[NoteController] = []
        self._visible: Dict[UUID, bool] = {}
        self._selected: Optional[NoteController] = None
        self._search_text = ""

        self._suppress_autosave = False
        self._save_handle: Optional[ScheduledHandle] = None
        self._pending_saves: Set[asyncio.Task] = set()
        self._closed = False

        self._listeners: List[CollectionListener] = []
        self._save_failure_listeners: List[SaveFailureListener] = []

        self.new_note_command = NoteCommand("new", self.create_note)
        self.delete_note_command = NoteCommand(
            "delete", self.delete_selected, lambda: self._selected is not None
        )
        self.save_all_command = NoteCommand(
            "save", self._save_in_background, lambda: len(self._notes) > 0
        )

    # =========================================================================
    # Observation
    # =========================================================================

    def subscribe(self, listener: CollectionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: CollectionListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def add_save_failure_listener(self, listener: SaveFailureListener) -> None:
        self._save_failure_listeners.append(listener)

    def _emit(self, event: CollectionEvent, note_id: Optional[UUID] = None) -> None:
        change = CollectionChange(event, note_id)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                self.logger.error("Collection listener failed for %s: %s", event.value, e, exc_info=True)

    # =========================================================================
    # Contents
    # =========================================================================

    @property
    def notes(self) -> tuple[NoteController, ...]:
        return tuple(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def find(self, note_id: UUID) -> Optional[NoteController]:
        for controller in self._notes:
            if controller.id == note_id:
                return controller
        return None

    def initialize(self, records: Iterable[NoteRecord]) -> None:
        """Wrap loaded records, repairing unusable geometry, without autosaving.

        An empty collection gets one default note, which is selected.
        """
        self._suppress_autosave = True
        try:
            for controller in list(self._notes):
                self._detach(controller)
            self._notes.clear()
            self._visible.clear()
            self._selected = None

            for record in records:
                self._repair(record)
                self._add(record)

            if not self._notes:
                self.logger.info("No stored notes, creating a default note")
                self._selected = self._add(self._new_record())
        finally:
            self._suppress_autosave = False

        self.logger.info("Initialized with %d notes", len(self._notes))

    def _repair(self, record: NoteRecord) -> None:
        geometry = self._placement.repair(record.left, record.top, record.width, record.height)
        current = (record.left, record.top, record.width, record.height)
        repaired = (geometry.left, geometry.top, geometry.width, geometry.height)
        if any(a != b for a, b in zip(current, repaired)):
            # NaN != NaN, so non-finite positions always count as repaired
            self.logger.warning(
                "Repaired geometry for note %s: %s -> %s",
                record.id, _format_geometry(current), _format_geometry(repaired),
            )
            record.left, record.top, record.width, record.height = repaired

        if record.duration < timedelta(0):
            record.duration = timedelta(0)
        record.remaining_time = min(max(record.remaining_time, timedelta(0)), record.duration)

    def _new_record(self) -> NoteRecord:
        geometry = self._placement.new_geometry()
        return NoteRecord(
            left=geometry.left,
            top=geometry.top,
            width=geometry.width,
            height=geometry.height,
            last_modified=self._clock(),
        )

    def _add(self, record: NoteRecord) -> NoteController:
        controller = NoteController(
            record,
            scheduler=self._scheduler,
            clock=self._clock,
            tick_interval=self._config.tick_interval_s,
            duration_step=self._config.duration_step_minutes,
            min_width=self._config.min_width,
            min_height=self._config.min_height,
        )
        controller.subscribe(self._on_note_changed)
        self._notes.append(controller)
        self._visible[controller.id] = self._matches(controller)
        self._emit(CollectionEvent.NOTE_ADDED, controller.id)
        return controller

    def _detach(self, controller: NoteController) -> None:
        controller.unsubscribe(self._on_note_changed)
        controller.stop()

    def create_note(self) -> NoteController:
        controller = self._add(self._new_record())
        self.logger.info("Created note %s", controller.id)
        self.selected = controller
        self._schedule_save()
        return controller

    def delete_selected(self) -> bool:
        controller = self._selected
        if controller is None:
            return False

        self._detach(controller)
        self._notes.remove(controller)
        self._visible.pop(controller.id, None)
        self.selected = None
        self.logger.info("Deleted note %s", controller.id)
        self._emit(CollectionEvent.NOTE_REMOVED, controller.id)
        self._schedule_save()
        return True

    # =========================================================================
    # Selection and filtering
    # =========================================================================

    @property
    def selected(self) -> Optional[NoteController]:
        return self._selected

    @selected.setter
    def selected(self, controller: Optional[NoteController]) -> None:
        if controller is not None and controller not in self._notes:
            raise ValueError(f"Note {controller.id} is not in this collection")
        if controller is self._selected:
            return
        self._selected = controller
        self._emit(CollectionEvent.SELECTION_CHANGED, controller.id if controller else None)

    @property
    def search_text(self) -> str:
        return self._search_text

    def set_search_text(self, text: Optional[str]) -> None:
        text = text or ""
        if text == self._search_text:
            return
        self._search_text = text
        for controller in self._notes:
            self._refresh_visibility(controller)

    def _matches(self, controller: NoteController) -> bool:
        needle = self._search_text.strip()
        if not needle:
            return True
        return needle.casefold() in controller.preview_text.casefold()

    def _refresh_visibility(self, controller: NoteController) -> None:
        visible = self._matches(controller)
        if self._visible.get(controller.id) != visible:
            self._visible[controller.id] = visible
            self._emit(CollectionEvent.VISIBILITY_CHANGED, controller.id)

    def is_visible(self, controller: NoteController) -> bool:
        return self._visible.get(controller.id, False)

    @property
    def visible_notes(self) -> List[NoteController]:
        return [c for c in self._notes if self._visible.get(c.id, False)]

    # =========================================================================
    # Persistence
    # =========================================================================

    def _on_note_changed(self, change: PropertyChange) -> None:
        if change.name == "content":
            controller = self.find(change.note_id)
            if controller is not None:
                self._refresh_visibility(controller)
        if change.persisted:
            self._schedule_save()

    def _schedule_save(self) -> None:
        if self._suppress_autosave or self._closed:
            return
        if self._save_handle is not None:
            self.logger.debug("Autosave debounce re-armed")
        cancel_quietly(self._save_handle)
        self._save_handle = self._scheduler.call_later(
            self._config.autosave_delay_s, self._on_save_debounce_elapsed
        )

    @property
    def has_pending_save(self) -> bool:
        return self._save_handle is not None

    def _on_save_debounce_elapsed(self) -> None:
        self._save_handle = None
        if self._closed:
            return
        self.logger.debug("Autosave debounce elapsed, saving %d notes", len(self._notes))
        self._save_in_background()

    def _save_in_background(self) -> None:
        create_logged_task(
            self.save_all(),
            logger=self.logger,
            context="NotesAutosave",
            pending=self._pending_saves,
        )

    async def wait_for_saves(self) -> None:
        """Wait until every save started so far has finished."""
        while self._pending_saves:
            await asyncio.gather(*list(self._pending_saves), return_exceptions=True)

    async def save_all(self) -> bool:
        """Write every note now; returns False (and notifies listeners) on failure."""
        snapshot = [controller.record for controller in self._notes]
        try:
            await self._storage.save(snapshot)
        except NoteStorageError as e:
            self.logger.error("Saving notes failed: %s", e)
            self._notify_save_failure(e)
            return False
        except Exception as e:
            self.logger.error("Unexpected error while saving notes: %s", e, exc_info=True)
            self._notify_save_failure(e)
            return False
        return True

    def _notify_save_failure(self, error: Exception) -> None:
        for listener in list(self._save_failure_listeners):
            try:
                listener(error)
            except Exception as e:
                self.logger.error("Save failure listener failed: %s", e, exc_info=True)

    async def shutdown(self) -> bool:
        """Stop timers and autosave, then write the final state."""
        if self._closed:
            return True
        self._closed = True

        cancel_quietly(self._save_handle)
        self._save_handle = None
        for controller in self._notes:
            controller.stop()

        await self.wait_for_saves()
        saved = await self.save_all()
        self.logger.info("Final save %s (%d notes)", "completed" if saved else "FAILED", len(self._notes))
        return saved


def _format_geometry(values) -> str:
    return "(" + ", ".join(f"{v:g}" for v in values) + ")"


__all__ = [
    "CollectionChange",
    "CollectionEvent",
    "NotesCollection",
]
