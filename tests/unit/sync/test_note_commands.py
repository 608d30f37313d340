"""
Unit tests for note command intents.

Commands are exercised directly against the fake API and a NoteStore, so
the send half and the apply half can be checked separately.
"""

import pytest

from notely.core.exceptions import NotFoundError
from notely.schemas.note import NoteCreate, NoteUpdate
from notely.sync.commands import (
    CreateNote,
    EditNote,
    PermanentlyDeleteNote,
    RestoreNote,
    SoftDeleteNote,
    ToggleBookmark,
    TogglePin,
)


@pytest.fixture
def account(fake_server, tokens):
    user = fake_server.register_user()
    tokens.set(fake_server.issue_token(user["id"]))
    return user


class TestApplyPolicy:
    """Server note replaces the local record; otherwise the local primitive runs."""

    def test_server_note_replaces_local_record(self, note_store, make_note):
        note_store.set_notes([make_note("1", title="Local")])

        TogglePin("1").apply(note_store, make_note("1", title="Server", is_pinned=True))

        assert note_store.by_id("1").title == "Server"
        assert note_store.by_id("1").is_pinned is True

    @pytest.mark.parametrize(
        "command, field, expected",
        [
            (TogglePin("1"), "is_pinned", True),
            (ToggleBookmark("1"), "is_bookmarked", True),
            (SoftDeleteNote("1"), "is_deleted", True),
        ],
    )
    def test_no_body_applies_local_primitive(self, note_store, make_note, command, field, expected):
        note_store.set_notes([make_note("1")])

        command.apply(note_store, None)

        assert getattr(note_store.by_id("1"), field) is expected

    def test_restore_local_primitive(self, note_store, make_note):
        note_store.set_notes([make_note("1", is_deleted=True)])

        RestoreNote("1").apply(note_store, None)

        assert note_store.by_id("1").is_deleted is False

    def test_edit_local_primitive_merges_changes(self, note_store, make_note):
        note_store.set_notes([make_note("1", title="Old")])

        EditNote("1", NoteUpdate(title="New")).apply(note_store, None)

        assert note_store.by_id("1").title == "New"
        assert note_store.by_id("1").synopsis == "Synopsis"

    def test_local_primitive_on_unknown_note_raises(self, note_store):
        with pytest.raises(NotFoundError):
            TogglePin("missing").apply(note_store, None)

    def test_permanent_delete_always_removes(self, note_store, make_note):
        note_store.set_notes([make_note("1")])

        PermanentlyDeleteNote("1").apply(note_store, make_note("1"))

        assert note_store.by_id("1") is None

    def test_create_inserts_server_note_first(self, note_store, make_note):
        note_store.set_notes([make_note("1")])

        CreateNote(NoteCreate(title="New")).apply(note_store, make_note("2", title="New"))

        assert [note.id for note in note_store.notes] == ["2", "1"]

    def test_create_has_no_local_primitive(self):
        assert not hasattr(CreateNote(NoteCreate(title="New")), "apply_local")
        assert hasattr(TogglePin("1"), "apply_local")


class TestInvalidates:
    def test_note_commands_invalidate_list_and_note(self):
        assert TogglePin("1").invalidates() == [("notes",), ("note", "1")]
        assert EditNote("1", NoteUpdate(title="x")).invalidates() == [("notes",), ("note", "1")]

    @pytest.mark.parametrize("command_cls", [SoftDeleteNote, RestoreNote, PermanentlyDeleteNote])
    def test_trash_commands_also_invalidate_trash(self, command_cls):
        assert ("trash",) in command_cls("1").invalidates()

    def test_create_invalidates_lists_only(self):
        assert CreateNote(NoteCreate(title="x")).invalidates() == [("notes",)]

    def test_name_is_class_name(self):
        assert TogglePin("1").name == "TogglePin"


class TestSend:
    @pytest.mark.asyncio
    async def test_toggle_pin_returns_server_note(self, api, fake_server, account):
        seeded = fake_server.add_note(account["id"])

        note = await TogglePin(seeded["id"]).send(api)

        assert note.is_pinned is True

    @pytest.mark.asyncio
    async def test_permanent_delete_returns_nothing(self, api, fake_server, account):
        seeded = fake_server.add_note(account["id"])

        assert await PermanentlyDeleteNote(seeded["id"]).send(api) is None
        assert seeded["id"] not in fake_server.notes

    @pytest.mark.asyncio
    async def test_create_sends_draft(self, api, fake_server, account):
        note = await CreateNote(NoteCreate(title="Hello", synopsis="S", content="C")).send(api)

        assert fake_server.notes[note.id]["title"] == "Hello"

    def test_failure_messages(self):
        assert CreateNote.failure_message == "Failed to create note"
        assert SoftDeleteNote.failure_message == "Failed to delete note"
        assert PermanentlyDeleteNote.failure_message == "Failed to permanently delete note"
