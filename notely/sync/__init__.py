"""
Server synchronisation.

QueryCache (reads), ViewScope (cancellation), NoteCommand intents (writes)
and NoteSync, which ties them to the NoteStore.
"""

from notely.sync.commands import (
    CreateNote,
    EditNote,
    NoteCommand,
    PermanentlyDeleteNote,
    RestoreNote,
    SoftDeleteNote,
    ToggleBookmark,
    TogglePin,
)
from notely.sync.notes import NoteSync
from notely.sync.query_cache import QueryCache
from notely.sync.scope import ScopeClosedError, ViewScope

__all__ = [
    "CreateNote",
    "EditNote",
    "NoteCommand",
    "NoteSync",
    "PermanentlyDeleteNote",
    "QueryCache",
    "RestoreNote",
    "ScopeClosedError",
    "SoftDeleteNote",
    "ToggleBookmark",
    "TogglePin",
    "ViewScope",
]
