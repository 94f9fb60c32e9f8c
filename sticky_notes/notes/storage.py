"""
Note Storage - loads and saves the note collection as a JSON file.

Stores notes in ~/.sticky_notes/notes.json by default.

Example content:
[
  {
    "id": "6f1c2d9e-5b0a-4d55-9d0e-2b7f7b1f3a10",
    "content": "<FlowDocument ...>...</FlowDocument>",
    "color": "#FFFAD46C",
    "isPinned": false,
    "left": 1000.0,
    "top": 380.0,
    "width": 320.0,
    "height": 280.0,
    "duration": "00:25:00",
    "remainingTime": "00:25:00",
    "lastModified": "2026-10-19T08:30:00.123456Z"
  }
]
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

import aiofiles

from sticky_notes.core.file_sync_utils import fsync_file
from sticky_notes.core.logging_utils import get_module_logger
from sticky_notes.core.paths import NOTES_FILE
from sticky_notes.notes.model import NoteRecord

logger = get_module_logger("NoteStorage")


class NoteStorageError(RuntimeError):
    """Raised when the note collection cannot be written."""


class NoteStorage:
    """Persistence gateway for the note collection.

    ``load`` is best effort and never raises. ``save`` replaces the whole
    file atomically and raises NoteStorageError on failure. Saves are
    serialized, so the last completed write wins.
    """

    def __init__(self, file_path: Path = NOTES_FILE):
        self._file_path = Path(file_path)
        self._write_lock = asyncio.Lock()

    @property
    def file_path(self) -> Path:
        return self._file_path

    async def load(self) -> List[NoteRecord]:
        if not self._file_path.exists():
            logger.info("No notes file at %s, starting empty", self._file_path)
            return []

        try:
            async with aiofiles.open(self._file_path, 'r', encoding='utf-8') as f:
                text = await f.read()
            data = json.loads(text) if text.strip() else []
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in notes file %s: %s", self._file_path, e)
            return []
        except Exception as e:
            logger.error("Failed to read notes file %s: %s", self._file_path, e)
            return []

        if not isinstance(data, list):
            logger.error("Notes file %s does not contain a list, ignoring it", self._file_path)
            return []

        records: List[NoteRecord] = []
        for index, entry in enumerate(data):
            try:
                records.append(NoteRecord.from_dict(entry))
            except (ValueError, TypeError, KeyError) as e:
                logger.warning("Skipping malformed note #%d: %s", index, e)

        logger.info("Loaded %d notes from %s", len(records), self._file_path)
        return records

    async def save(self, records: Sequence[NoteRecord]) -> None:
        try:
            payload = [record.to_dict() for record in records]
        except (ValueError, TypeError, AttributeError) as e:
            raise NoteStorageError(f"Failed to serialize notes: {e}") from e

        async with self._write_lock:
            try:
                await asyncio.to_thread(self._write_file, payload)
            except (OSError, ValueError, TypeError) as e:
                logger.error("Failed to save notes to %s: %s", self._file_path, e)
                raise NoteStorageError(f"Failed to save notes to {self._file_path}: {e}") from e

        logger.debug("Saved %d notes to %s", len(payload), self._file_path)

    def _write_file(self, payload: list) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                dir=str(self._file_path.parent),
                prefix=".notes-",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as tmp:
                tmp_path = Path(tmp.name)
                json.dump(payload, tmp, indent=2)
                fsync_file(tmp)

            os.replace(tmp_path, self._file_path)
        finally:
            if tmp_path is not None:
                try:
                    tmp_path.unlink()
                except FileNotFoundError:
                    pass


__all__ = ["NoteStorage", "NoteStorageError"]
