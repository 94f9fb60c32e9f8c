"""Unit tests for NoteStorage."""

import asyncio
import json
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from sticky_notes.notes.model import NoteRecord
from sticky_notes.notes.storage import NoteStorage, NoteStorageError


def _records():
    return [
        NoteRecord(
            content="<FlowDocument><Paragraph>Buy milk</Paragraph></FlowDocument>",
            is_pinned=True,
            left=100.0,
            top=50.0,
            duration=timedelta(minutes=25),
            remaining_time=timedelta(minutes=12, seconds=30),
            last_modified=datetime(2026, 10, 19, 8, 30, 0, 250000, tzinfo=timezone.utc),
        ),
        NoteRecord(content="plain", color="#FFEAC1FF", width=500.0, height=400.0),
    ]


class TestNoteStorageLoad:
    """Test best-effort loading."""

    @pytest.mark.asyncio
    async def test_missing_file_returns_empty(self, notes_file):
        storage = NoteStorage(notes_file)
        assert await storage.load() == []

    @pytest.mark.asyncio
    async def test_invalid_json_returns_empty(self, notes_file):
        notes_file.parent.mkdir(parents=True)
        notes_file.write_text("{not json", encoding="utf-8")

        assert await NoteStorage(notes_file).load() == []

    @pytest.mark.asyncio
    async def test_empty_file_returns_empty(self, notes_file):
        notes_file.parent.mkdir(parents=True)
        notes_file.write_text("", encoding="utf-8")

        assert await NoteStorage(notes_file).load() == []

    @pytest.mark.asyncio
    async def test_non_list_returns_empty(self, notes_file):
        notes_file.parent.mkdir(parents=True)
        notes_file.write_text('{"notes": []}', encoding="utf-8")

        assert await NoteStorage(notes_file).load() == []

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self, notes_file):
        good = NoteRecord(content="keep me")
        notes_file.parent.mkdir(parents=True)
        notes_file.write_text(
            json.dumps([good.to_dict(), {"id": "broken"}, "junk"]),
            encoding="utf-8",
        )

        records = await NoteStorage(notes_file).load()

        assert records == [good]

    @pytest.mark.asyncio
    async def test_loads_pascal_case_file(self, notes_file):
        notes_file.parent.mkdir(parents=True)
        notes_file.write_text(json.dumps([{
            "Id": "6f1c2d9e-5b0a-4d55-9d0e-2b7f7b1f3a10",
            "Content": "legacy",
            "Color": "#FFFAD46C",
            "IsPinned": False,
            "Left": 10, "Top": 20, "Width": 320, "Height": 280,
            "Duration": "00:00:00",
            "RemainingTime": "00:00:00",
            "LastModified": "2026-01-02T03:04:05.1234567Z",
        }]), encoding="utf-8")

        records = await NoteStorage(notes_file).load()

        assert len(records) == 1
        assert records[0].content == "legacy"


class TestNoteStorageSave:
    """Test whole-file saving."""

    @pytest.mark.asyncio
    async def test_round_trip(self, notes_file):
        storage = NoteStorage(notes_file)
        records = _records()

        await storage.save(records)
        loaded = await storage.load()

        assert loaded == records

    @pytest.mark.asyncio
    async def test_creates_directory_and_indents(self, notes_file):
        assert not notes_file.parent.exists()

        await NoteStorage(notes_file).save(_records())

        text = notes_file.read_text(encoding="utf-8")
        assert text.startswith("[\n  {")
        assert '"isPinned": true' in text

    @pytest.mark.asyncio
    async def test_overwrites_previous_contents(self, notes_file):
        storage = NoteStorage(notes_file)
        await storage.save(_records())
        await storage.save([])

        assert await storage.load() == []

    @pytest.mark.asyncio
    async def test_leaves_no_temp_files(self, notes_file):
        await NoteStorage(notes_file).save(_records())

        assert sorted(p.name for p in notes_file.parent.iterdir()) == ["notes.json"]

    @pytest.mark.asyncio
    async def test_concurrent_saves_keep_file_valid(self, notes_file):
        storage = NoteStorage(notes_file)
        batches = [[NoteRecord(content=f"batch {i}")] for i in range(5)]

        await asyncio.gather(*(storage.save(batch) for batch in batches))

        loaded = await storage.load()
        assert len(loaded) == 1
        assert loaded[0].content.startswith("batch ")

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, notes_file):
        storage = NoteStorage(notes_file)

        with patch("sticky_notes.notes.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(NoteStorageError, match="disk full"):
                await storage.save(_records())

        assert not notes_file.exists()

    @pytest.mark.asyncio
    async def test_unwritable_directory_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        storage = NoteStorage(blocker / "notes.json")

        with pytest.raises(NoteStorageError):
            await storage.save(_records())

    @pytest.mark.asyncio
    async def test_failed_save_keeps_previous_file(self, notes_file):
        storage = NoteStorage(notes_file)
        await storage.save(_records())
        before = notes_file.read_text(encoding="utf-8")

        with patch("sticky_notes.notes.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(NoteStorageError):
                await storage.save([])

        assert notes_file.read_text(encoding="utf-8") == before
        assert [p.name for p in notes_file.parent.iterdir() if p.name != "notes.json"] == []


def test_storage_error_is_runtime_error():
    assert issubclass(NoteStorageError, RuntimeError)
    assert os.fspath(NoteStorage("x/notes.json").file_path).endswith("notes.json")
