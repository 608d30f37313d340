"""
Note Synchroniser.

Bridge between the remote API and the local NoteStore.

Reads go through the QueryCache (de-duplicated, retried) and their result
is written into the store. A read invalidated by a write while in flight is
fetched again, and is never written if it is still outdated.

Writes are NoteCommands: the command is sent, and only a confirmed
response is applied locally and the affected cache keys marked stale. A
failed request leaves the store untouched apart from its ``error`` string.

Every method takes an optional ViewScope; once that scope is closed no
response is written into the store on its behalf.
"""

from typing import Awaitable, Callable, TypeVar, cast

from notely.client.api import NotelyAPI
from notely.core.exceptions import ApplicationError, NotFoundError, describe_error
from notely.core.logging import get_logger, log_with_source
from notely.schemas.note import Note, NoteCreate, NoteUpdate
from notely.stores.notes import NoteStore
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
from notely.sync.query_cache import QueryCache, QueryKey
from notely.sync.scope import ViewScope, is_live

logger = get_logger(__name__)

T = TypeVar("T")


class NoteSync:
    """
    Keeps the NoteStore in step with the API.

    Usage:
        sync = NoteSync(api, notes, cache)
        await sync.load_notes()
        await sync.toggle_pin("abc")
    """

    def __init__(self, api: NotelyAPI, notes: NoteStore, cache: QueryCache) -> None:
        self.api = api
        self.notes = notes
        self.cache = cache

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def _read(
        self,
        key: QueryKey,
        fetcher: Callable[[], Awaitable[T]],
        apply: Callable[[T], None],
        failure_message: str,
        scope: ViewScope | None,
        force: bool,
    ) -> T:
        if is_live(scope):
            self.notes.set_loading(True)
        try:
            data = await self.cache.fetch(key, fetcher, force=force)
            if self.cache.is_stale(key):
                # a write landed while this read was in flight
                log_with_source(logger, "sync", "debug", "Refetching query invalidated mid-flight", key=key)
                data = await self.cache.fetch(key, fetcher, force=True)
        except ApplicationError as exc:
            if is_live(scope):
                self.notes.set_error(describe_error(exc, failure_message))
            log_with_source(logger, "sync", "warning", "Read failed", key=key, error=exc.message)
            raise
        finally:
            if is_live(scope):
                self.notes.set_loading(False)

        if not is_live(scope):
            log_with_source(logger, "sync", "debug", "Discarding response for closed scope", key=key)
            return data

        if self.cache.is_stale(key):
            log_with_source(logger, "sync", "info", "Skipping outdated response", key=key)
            return data

        apply(data)
        return data

    async def load_notes(self, *, scope: ViewScope | None = None, force: bool = False) -> list[Note]:
        """Fetch all notes and replace the store's collection with them."""
        notes = await self._read(
            ("notes",), self.api.list_notes, self.notes.set_notes,
            "Failed to load notes", scope, force,
        )
        log_with_source(logger, "sync", "info", "Notes loaded", count=len(notes))
        return notes

    async def load_pinned(self, *, scope: ViewScope | None = None, force: bool = False) -> list[Note]:
        """Fetch pinned notes and upsert them without dropping other records."""

        def apply(notes: list[Note]) -> None:
            for note in notes:
                self.notes.upsert(note)

        return await self._read(
            ("notes", "pinned"), self.api.list_pinned_notes, apply,
            "Failed to load pinned notes", scope, force,
        )

    async def load_note(self, note_id: str, *, scope: ViewScope | None = None, force: bool = False) -> Note:
        """Fetch one note and replace its cached record."""
        return await self._read(
            ("note", note_id), lambda: self.api.get_note(note_id), self.notes.upsert,
            "Failed to load note", scope, force,
        )

    async def load_trash(self, *, scope: ViewScope | None = None, force: bool = False) -> list[Note]:
        """Fetch trashed notes and replace the store's deleted subset."""
        return await self._read(
            ("trash",), self.api.list_trash, self.notes.set_deleted_notes,
            "Failed to load trash", scope, force,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def dispatch(self, command: NoteCommand, *, scope: ViewScope | None = None) -> Note | None:
        """
        Send a command and apply it locally once the server confirms.

        Raises:
            ApplicationError: When the request fails; the store's error
                field carries the human-readable message.
        """
        if is_live(scope):
            self.notes.clear_error()

        log_with_source(logger, "sync", "debug", "Dispatching command", command=command.name, note_id=command.note_id)

        try:
            result = await command.send(self.api)
        except ApplicationError as exc:
            if is_live(scope):
                self.notes.set_error(describe_error(exc, command.failure_message))
            log_with_source(
                logger, "sync", "warning", "Command failed",
                command=command.name, note_id=command.note_id, error=exc.message,
            )
            raise

        for key in command.invalidates():
            self.cache.invalidate(*key)

        if not is_live(scope):
            log_with_source(logger, "sync", "debug", "Discarding result for closed scope", command=command.name)
            return result

        try:
            command.apply(self.notes, result)
        except NotFoundError:
            log_with_source(
                logger, "sync", "warning", "Confirmed note missing from local cache",
                command=command.name, note_id=command.note_id,
            )

        log_with_source(logger, "sync", "info", "Command applied", command=command.name, note_id=command.note_id)
        return result

    async def create_note(self, draft: NoteCreate, *, scope: ViewScope | None = None) -> Note:
        return cast(Note, await self.dispatch(CreateNote(draft), scope=scope))

    async def edit_note(self, note_id: str, update: NoteUpdate, *, scope: ViewScope | None = None) -> Note | None:
        return await self.dispatch(EditNote(note_id, update), scope=scope)

    async def delete_note(self, note_id: str, *, scope: ViewScope | None = None) -> Note | None:
        return await self.dispatch(SoftDeleteNote(note_id), scope=scope)

    async def restore_note(self, note_id: str, *, scope: ViewScope | None = None) -> Note | None:
        return await self.dispatch(RestoreNote(note_id), scope=scope)

    async def purge_note(self, note_id: str, *, scope: ViewScope | None = None) -> None:
        await self.dispatch(PermanentlyDeleteNote(note_id), scope=scope)

    async def toggle_pin(self, note_id: str, *, scope: ViewScope | None = None) -> Note | None:
        return await self.dispatch(TogglePin(note_id), scope=scope)

    async def toggle_bookmark(self, note_id: str, *, scope: ViewScope | None = None) -> Note | None:
        return await self.dispatch(ToggleBookmark(note_id), scope=scope)
