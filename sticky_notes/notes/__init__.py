"""Note record, persistence, per-note controller and the notes collection."""

from .collection import CollectionChange, CollectionEvent, NotesCollection
from .commands import NoteCommand
from .config import NotesConfig
from .content import Foreground, extract_preview_text, readable_foreground
from .controller import FocusState, NoteController, PropertyChange
from .model import COLOR_OPTIONS, DEFAULT_COLOR, NoteRecord
from .storage import NoteStorage, NoteStorageError

__all__ = [
    'COLOR_OPTIONS',
    'CollectionChange',
    'CollectionEvent',
    'DEFAULT_COLOR',
    'FocusState',
    'Foreground',
    'NoteCommand',
    'NoteController',
    'NoteRecord',
    'NoteStorage',
    'NoteStorageError',
    'NotesCollection',
    'NotesConfig',
    'PropertyChange',
    'extract_preview_text',
    'readable_foreground',
]
