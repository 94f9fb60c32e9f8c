"""Unit test fixtures for isolated, fast test execution.

Everything time-related is virtual: note timers and the autosave debounce
run on a ManualScheduler, and lastModified comes from a FakeClock.
Storage is either a real NoteStorage in tmp_path or an AsyncMock.
"""

from __future__ import annotations

from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from sticky_notes.core.screen import PlacementPolicy, ScreenBounds
from sticky_notes.notes.collection import NotesCollection
from sticky_notes.notes.config import NotesConfig
from sticky_notes.notes.controller import NoteController
from sticky_notes.notes.model import NoteRecord
from sticky_notes.notes.storage import NoteStorage
from tests.infrastructure.mocks.time_mocks import FakeClock, ManualScheduler

WORK_AREA = ScreenBounds(0.0, 0.0, 1920.0, 1040.0)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def placement() -> PlacementPolicy:
    return PlacementPolicy(WORK_AREA)


@pytest.fixture
def make_controller(scheduler, clock):
    """Factory for controllers over fresh or given records."""

    def _make(record: NoteRecord = None, **overrides: Any) -> NoteController:
        if record is None:
            record = NoteRecord(last_modified=clock(), **overrides)
        return NoteController(record, scheduler=scheduler, clock=clock)

    return _make


@pytest.fixture
def saved_snapshots() -> List[List[Dict[str, Any]]]:
    """Wire form of every collection passed to the mock storage."""
    return []


@pytest.fixture
def mock_storage(saved_snapshots):
    storage = MagicMock(spec=NoteStorage)

    async def _save(records):
        saved_snapshots.append([record.to_dict() for record in records])

    storage.save = AsyncMock(side_effect=_save)
    storage.load = AsyncMock(return_value=[])
    return storage


@pytest.fixture
def make_collection(mock_storage, scheduler, placement, clock):
    """Factory for an initialized collection."""

    def _make(records=(), storage=None, config: NotesConfig = None) -> NotesCollection:
        collection = NotesCollection(
            storage if storage is not None else mock_storage,
            scheduler=scheduler,
            placement=placement,
            config=config,
            clock=clock,
        )
        collection.initialize(list(records))
        return collection

    return _make
