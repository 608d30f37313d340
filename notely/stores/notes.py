"""
Note Cache Store.

Local mirror of the user's notes. Every method is synchronous and knows
nothing about the network: callers apply a mutation here only after the
matching API call has succeeded. Concurrent edits of one note are last
write wins; the next full refetch reconciles.

The whole collection is persisted after each mutation so the cache
survives restarts.
"""

import uuid
from typing import Any, Iterable

from pydantic import ValidationError as PydanticValidationError

from notely.core.exceptions import NotFoundError
from notely.core.logging import get_logger, log_with_source
from notely.schemas.base import utc_now
from notely.schemas.note import Note, NoteCreate
from notely.stores.persistence import LocalStorage

logger = get_logger(__name__)

LOCAL_ID_PREFIX = "local-"


class NoteStore:
    """
    Ordered, in-memory collection of notes keyed by identifier.

    Usage:
        store = NoteStore(storage)
        store.set_notes(notes)
        store.toggle_pin("abc")
        store.pinned()
    """

    def __init__(self, storage: LocalStorage | None = None, key: str = "notes-storage") -> None:
        self._storage = storage
        self._key = key
        self._notes: list[Note] = []
        self.is_loading = False
        self.error: str | None = None
        self._load()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load(self) -> None:
        if self._storage is None:
            return
        blob = self._storage.read(self._key)
        if not isinstance(blob, dict):
            return
        loaded: list[Note] = []
        for raw in blob.get("notes", []):
            try:
                loaded.append(Note.model_validate(raw))
            except PydanticValidationError as e:
                log_with_source(
                    logger, "store", "warning",
                    "Skipping invalid cached note",
                    error=str(e),
                )
        self._notes = loaded

    def _persist(self) -> None:
        if self._storage is None:
            return
        self._storage.write(self._key, {"notes": [note.to_wire() for note in self._notes]})

    def _index(self, note_id: str) -> int:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        raise NotFoundError(f"Note {note_id} not found")

    def _replace_at(self, index: int, **changes: Any) -> Note:
        updated = self._notes[index].model_copy(update=changes)
        self._notes[index] = updated
        self._persist()
        return updated

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @property
    def notes(self) -> list[Note]:
        """A copy of the full collection in display order."""
        return list(self._notes)

    def set_notes(self, notes: Iterable[Note]) -> None:
        """Replace the whole collection (after a successful list fetch)."""
        self._notes = list(notes)
        self._persist()

    def add_note(self, note: Note | NoteCreate) -> Note:
        """
        Insert a note at the front of the collection.

        A bare draft gets a temporary ``local-`` identifier and fresh
        timestamps. A note whose identifier is already cached replaces the
        cached record, so a server-confirmed note reconciles by identifier.
        """
        if isinstance(note, NoteCreate):
            now = utc_now()
            note = Note(
                id=f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}",
                title=note.title,
                synopsis=note.synopsis,
                content=note.content,
                date_created=now,
                last_updated=now,
            )
        self._notes = [note] + [existing for existing in self._notes if existing.id != note.id]
        self._persist()
        return note

    def upsert(self, note: Note) -> Note:
        """Replace the record with the same identifier in place, or insert it at the front."""
        try:
            index = self._index(note.id)
        except NotFoundError:
            return self.add_note(note)
        self._notes[index] = note
        self._persist()
        return note

    def update_note(self, note_id: str, **changes: Any) -> Note:
        """
        Merge changes into a note and refresh ``last_updated``.

        Raises:
            NotFoundError: If no cached note has this identifier
        """
        unknown = set(changes) - set(Note.model_fields)
        if unknown:
            raise ValueError(f"Unknown note fields: {', '.join(sorted(unknown))}")
        index = self._index(note_id)
        # identifier and creation time never change
        changes.pop("id", None)
        changes.pop("date_created", None)
        date_created = self._notes[index].date_created
        changes["last_updated"] = max(utc_now(), date_created)
        return self._replace_at(index, **changes)

    def delete_note(self, note_id: str) -> Note:
        """Soft-delete: the note moves to the trash view."""
        return self._replace_at(self._index(note_id), is_deleted=True)

    def restore_note(self, note_id: str) -> Note:
        return self._replace_at(self._index(note_id), is_deleted=False)

    def permanently_delete_note(self, note_id: str) -> None:
        """Remove the record entirely. Unknown identifiers are ignored."""
        self._notes = [note for note in self._notes if note.id != note_id]
        self._persist()

    def toggle_pin(self, note_id: str) -> Note:
        index = self._index(note_id)
        return self._replace_at(index, is_pinned=not self._notes[index].is_pinned)

    def toggle_bookmark(self, note_id: str) -> Note:
        index = self._index(note_id)
        return self._replace_at(index, is_bookmarked=not self._notes[index].is_bookmarked)

    def set_deleted_notes(self, notes: Iterable[Note]) -> None:
        """Replace the trashed subset (after a trash refetch), keeping active notes."""
        trashed = [note for note in notes if note.is_deleted]
        trashed_ids = {note.id for note in trashed}
        active = [
            note for note in self._notes
            if not note.is_deleted and note.id not in trashed_ids
        ]
        self._notes = active + trashed
        self._persist()

    def clear(self) -> None:
        """Drop every note, in memory and on disk."""
        self._notes = []
        self.error = None
        self.is_loading = False
        if self._storage is not None:
            self._storage.remove(self._key)

    def set_loading(self, loading: bool) -> None:
        self.is_loading = loading

    def set_error(self, error: str | None) -> None:
        self.error = error

    def clear_error(self) -> None:
        self.error = None

    # -------------------------------------------------------------------------
    # Derived views (computed on every call)
    # -------------------------------------------------------------------------

    def active(self) -> list[Note]:
        return [note for note in self._notes if not note.is_deleted]

    def deleted(self) -> list[Note]:
        return [note for note in self._notes if note.is_deleted]

    def pinned(self) -> list[Note]:
        return [note for note in self._notes if not note.is_deleted and note.is_pinned]

    def bookmarked(self) -> list[Note]:
        return [note for note in self._notes if not note.is_deleted and note.is_bookmarked]

    def by_id(self, note_id: str) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None
