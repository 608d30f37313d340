"""
Note Commands.

Every user action on a note is an intent object. The synchroniser sends
the intent to the API and, only once the server has confirmed it, applies
it to the local NoteStore.

Reconciliation policy for commands on an existing note: when the server
answers with the canonical note, that note replaces the local record; when
it answers with no body, the matching local primitive is applied instead.
A created note is inserted only once the server has issued its identifier.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, cast

from notely.client.api import NotelyAPI
from notely.schemas.note import Note, NoteCreate, NoteUpdate
from notely.stores.notes import NoteStore
from notely.sync.query_cache import QueryKey


class NoteCommand(ABC):
    """Base class for note intents."""

    failure_message: ClassVar[str] = "Something went wrong. Please try again."

    def __init__(self, note_id: str) -> None:
        self.note_id = note_id

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def send(self, api: NotelyAPI) -> Note | None:
        """Perform the remote half of the action."""

    @abstractmethod
    def apply(self, store: NoteStore, result: Note | None) -> None:
        """Reconcile the confirmed result into the store."""

    def invalidates(self) -> list[QueryKey]:
        """Cache keys whose data this action makes stale."""
        return [("notes",), ("note", self.note_id)]


class ExistingNoteCommand(NoteCommand):
    """Intent on a note the server already knows."""

    @abstractmethod
    def apply_local(self, store: NoteStore) -> None:
        """The local primitive used when the server returns no note."""

    def apply(self, store: NoteStore, result: Note | None) -> None:
        if result is not None:
            store.upsert(result)
        else:
            self.apply_local(store)


class CreateNote(NoteCommand):
    failure_message = "Failed to create note"

    def __init__(self, draft: NoteCreate) -> None:
        super().__init__(note_id="")
        self.draft = draft

    async def send(self, api: NotelyAPI) -> Note:
        return await api.create_note(self.draft)

    def apply(self, store: NoteStore, result: Note | None) -> None:
        store.add_note(cast(Note, result))

    def invalidates(self) -> list[QueryKey]:
        return [("notes",)]


class EditNote(ExistingNoteCommand):
    failure_message = "Failed to update note"

    def __init__(self, note_id: str, update: NoteUpdate) -> None:
        super().__init__(note_id)
        self.update = update

    async def send(self, api: NotelyAPI) -> Note:
        return await api.update_note(self.note_id, self.update)

    def apply_local(self, store: NoteStore) -> None:
        store.update_note(self.note_id, **self.update.changes())


class SoftDeleteNote(ExistingNoteCommand):
    failure_message = "Failed to delete note"

    async def send(self, api: NotelyAPI) -> Note:
        return await api.soft_delete_note(self.note_id)

    def apply_local(self, store: NoteStore) -> None:
        store.delete_note(self.note_id)

    def invalidates(self) -> list[QueryKey]:
        return super().invalidates() + [("trash",)]


class RestoreNote(ExistingNoteCommand):
    failure_message = "Failed to restore note"

    async def send(self, api: NotelyAPI) -> Note:
        return await api.restore_note(self.note_id)

    def apply_local(self, store: NoteStore) -> None:
        store.restore_note(self.note_id)

    def invalidates(self) -> list[QueryKey]:
        return super().invalidates() + [("trash",)]


class PermanentlyDeleteNote(NoteCommand):
    failure_message = "Failed to permanently delete note"

    async def send(self, api: NotelyAPI) -> None:
        await api.delete_note(self.note_id)
        return None

    def apply(self, store: NoteStore, result: Note | None) -> None:
        store.permanently_delete_note(self.note_id)

    def invalidates(self) -> list[QueryKey]:
        return super().invalidates() + [("trash",)]


class TogglePin(ExistingNoteCommand):
    failure_message = "Failed to update pin"

    async def send(self, api: NotelyAPI) -> Note:
        return await api.toggle_pin(self.note_id)

    def apply_local(self, store: NoteStore) -> None:
        store.toggle_pin(self.note_id)


class ToggleBookmark(ExistingNoteCommand):
    failure_message = "Failed to update bookmark"

    async def send(self, api: NotelyAPI) -> Note:
        return await api.toggle_bookmark(self.note_id)

    def apply_local(self, store: NoteStore) -> None:
        store.toggle_bookmark(self.note_id)
