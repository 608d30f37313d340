"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Remote API:
    Tests never reach a real server. ``fake_server`` is an in-memory
    implementation of the Notely REST API served through
    ``httpx.MockTransport``; ``app_factory`` builds NotelyApp instances
    wired to it with storage under the test's tmp_path.
"""

import asyncio
import json
import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest

from notely.app import NotelyApp
from notely.schemas.note import Note
from notely.schemas.user import User
from notely.services.media import MediaUploader
from notely.services.sentiment import SentimentService
from notely.stores.persistence import LocalStorage

BASE_URL = "http://notely.test/api"
UPLOAD_URL = "https://media.test/image/upload"


# =============================================================================
# Fake API
# =============================================================================


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json(status: int, body: Any = None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, json=body)


class FakeNotelyServer:
    """
    In-memory Notely API.

    Usage:
        server = FakeNotelyServer()
        user = server.register_user()
        server.add_note(user["id"], title="Hello")
        server.fail("GET", "/entries", 503)
    """

    base_url = BASE_URL

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.passwords: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.notes: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.uploads: list[bytes] = []
        self._failures: list[dict[str, Any]] = []

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def register_user(
        self,
        username: str = "ada",
        email: str = "ada@example.com",
        password: str = "secret1",
        first_name: str = "Ada",
        last_name: str = "Lovelace",
        onboarded: bool = True,
        preferences: list[str] | None = None,
    ) -> dict[str, Any]:
        user_id = f"user-{uuid.uuid4().hex[:8]}"
        user = {
            "id": user_id,
            "firstName": first_name,
            "lastName": last_name,
            "username": username,
            "email": email,
            "bio": None,
            "avatar": None,
            "preferences": preferences or [],
            "hasCompletedOnboarding": onboarded,
            "dateJoined": _now(),
        }
        self.users[user_id] = user
        self.passwords[user_id] = password
        return user

    def issue_token(self, user_id: str) -> str:
        token = f"token-{uuid.uuid4().hex}"
        self.tokens[token] = user_id
        return token

    def add_note(
        self,
        user_id: str,
        title: str = "A note",
        synopsis: str = "A synopsis",
        content: str = "Some *content*",
        created: datetime | None = None,
        is_deleted: bool = False,
        is_pinned: bool = False,
        is_bookmarked: bool = False,
    ) -> dict[str, Any]:
        note_id = f"note-{uuid.uuid4().hex[:8]}"
        stamp = (created or datetime.now(timezone.utc)).isoformat()
        note = {
            "id": note_id,
            "title": title,
            "synopsis": synopsis,
            "content": content,
            "dateCreated": stamp,
            "lastUpdated": stamp,
            "isDeleted": is_deleted,
            "isPinned": is_pinned,
            "isBookmarked": is_bookmarked,
            "userId": user_id,
        }
        self.notes[note_id] = note
        return note

    def fail(self, method: str, path: str, status: int, message: str | None = None, times: int = 1) -> None:
        """Answer the next `times` matching requests with an error status."""
        self._failures.append({
            "method": method, "path": path, "status": status, "message": message, "times": times,
        })

    def count(self, method: str, path: str) -> int:
        return sum(
            1 for request in self.requests
            if request.method == method and self._route(request) == path
        )

    # -------------------------------------------------------------------------
    # Transport handlers
    # -------------------------------------------------------------------------

    @staticmethod
    def _route(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/api"):] if path.startswith("/api") else path

    def _injected_failure(self, method: str, path: str) -> httpx.Response | None:
        for failure in self._failures:
            if failure["method"] == method and failure["path"] == path and failure["times"] > 0:
                failure["times"] -= 1
                body = {"message": failure["message"]} if failure["message"] else {}
                return _json(failure["status"], body)
        return None

    def _current_user(self, request: httpx.Request) -> dict[str, Any] | None:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        user_id = self.tokens.get(header[len("Bearer "):])
        return self.users.get(user_id) if user_id else None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method
        path = self._route(request)

        failure = self._injected_failure(method, path)
        if failure is not None:
            return failure

        body = json.loads(request.content) if request.content else {}

        if method == "POST" and path == "/auth/register":
            return self._register(body)
        if method == "POST" and path == "/auth/login":
            return self._login(body)

        user = self._current_user(request)
        if user is None:
            return _json(401, {"message": "Unauthorized"})

        if method == "POST" and path == "/auth/password":
            if body.get("currentPassword") != self.passwords[user["id"]]:
                return _json(400, {"message": "Current password is incorrect"})
            self.passwords[user["id"]] = body["newPassword"]
            return _json(204)
        if method == "PATCH" and path == "/user":
            user.update(body)
            return _json(200, {"data": {"updatedUser": user}})
        if method == "GET" and path == "/entries/trash":
            entries = [n for n in self._owned(user) if n["isDeleted"]]
            return _json(200, {"data": {"entries": entries}})
        if method == "GET" and path == "/entries":
            entries = [n for n in self._owned(user) if not n["isDeleted"]]
            if request.url.params.get("isPinned") == "true":
                entries = [n for n in entries if n["isPinned"]]
            return _json(200, {"data": {"entries": entries}})
        if method == "POST" and path == "/entries":
            note = self.add_note(
                user["id"],
                title=body.get("title", ""),
                synopsis=body.get("synopsis", ""),
                content=body.get("content", ""),
            )
            return _json(201, {"data": {"entry": note}})
        if path.startswith("/entry/pin/") and method == "PATCH":
            return self._flip(user, path[len("/entry/pin/"):], "isPinned")
        if path.startswith("/entry/bookmark/") and method == "PATCH":
            return self._flip(user, path[len("/entry/bookmark/"):], "isBookmarked")
        if path.startswith("/entry/"):
            note = self._owned_note(user, path[len("/entry/"):])
            if note is None:
                return _json(404, {"message": "Entry not found"})
            if method == "GET":
                return _json(200, {"data": {"entry": note}})
            if method == "PATCH":
                note.update(body)
                note["lastUpdated"] = _now()
                return _json(200, {"data": {"entry": note}})
            if method == "DELETE":
                del self.notes[note["id"]]
                return _json(200, {"message": "Entry deleted"})

        return _json(404, {"message": f"No route for {method} {path}"})

    async def handle_upload(self, request: httpx.Request) -> httpx.Response:
        content = await request.aread()
        self.uploads.append(content)
        if b"upload_preset" not in content:
            return _json(400, {"error": {"message": "Upload preset must be specified"}})
        return _json(200, {"secure_url": f"https://media.test/avatars/{len(self.uploads)}.png"})

    def _register(self, body: dict[str, Any]) -> httpx.Response:
        for user in self.users.values():
            if user["email"] == body.get("email") or user["username"] == body.get("username"):
                return _json(409, {"message": "Email or username already exists"})
        user = self.register_user(
            username=body["username"],
            email=body["email"],
            password=body["password"],
            first_name=body["firstName"],
            last_name=body["lastName"],
            onboarded=False,
        )
        return _json(201, {"data": {"user": user, "jwt_token": self.issue_token(user["id"])}})

    def _login(self, body: dict[str, Any]) -> httpx.Response:
        identifier = body.get("identifier")
        for user in self.users.values():
            if identifier in (user["email"], user["username"]):
                if self.passwords[user["id"]] != body.get("password"):
                    return _json(401, {})
                return _json(200, {"data": {"user": user, "jwt_token": self.issue_token(user["id"])}})
        return _json(404, {})

    def _owned(self, user: dict[str, Any]) -> list[dict[str, Any]]:
        return [note for note in self.notes.values() if note["userId"] == user["id"]]

    def _owned_note(self, user: dict[str, Any], note_id: str) -> dict[str, Any] | None:
        note = self.notes.get(note_id)
        if note is None or note["userId"] != user["id"]:
            return None
        return note

    def _flip(self, user: dict[str, Any], note_id: str, field: str) -> httpx.Response:
        note = self._owned_note(user, note_id)
        if note is None:
            return _json(404, {"message": "Entry not found"})
        note[field] = not note[field]
        note["lastUpdated"] = _now()
        return _json(200, {"data": {"entry": note}})


class HeldTransport:
    """
    Async MockTransport handler over the fake server that answers the first
    matching request from the server state at request time, then holds the
    reply until ``release`` is set. Every other request is answered at once.

    Usage:
        held = HeldTransport(fake_server, "GET", "/entries")
        task = asyncio.create_task(sync.load_notes())
        await held.held.wait()
        ...
        held.release.set()
    """

    def __init__(self, server: FakeNotelyServer, method: str, path: str) -> None:
        self.server = server
        self.method = method
        self.path = path
        self.held = asyncio.Event()
        self.release = asyncio.Event()
        self._holding = True

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        response = self.server.handle(request)
        if self._holding and request.method == self.method and self.server._route(request) == self.path:
            self._holding = False
            self.held.set()
            await self.release.wait()
        return response


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_server() -> FakeNotelyServer:
    """A fresh in-memory API for each test."""
    return FakeNotelyServer()


@pytest.fixture
def hold_first(fake_server: FakeNotelyServer) -> Callable[[str, str], HeldTransport]:
    """Build a HeldTransport for the first request matching method and path."""

    def build(method: str, path: str) -> HeldTransport:
        return HeldTransport(fake_server, method, path)

    return build


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def storage(storage_dir: Path) -> LocalStorage:
    return LocalStorage(storage_dir)


@pytest.fixture
def app_factory(storage_dir: Path, fake_server: FakeNotelyServer) -> Callable[[], NotelyApp]:
    """
    Build NotelyApp instances bound to the fake API.

    Apps built by one factory share the same storage directory, so a
    session saved by one is loaded by the next (like separate CLI runs).
    Pass a handler to answer API requests with something other than the
    plain fake server.
    """

    def build(handler: Callable[[httpx.Request], Any] | None = None) -> NotelyApp:
        return NotelyApp(
            storage_dir,
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler or fake_server.handle),
            uploader=MediaUploader(
                UPLOAD_URL,
                "notely-avatars",
                transport=httpx.MockTransport(fake_server.handle_upload),
            ),
            sentiment=SentimentService(model=None),
            retry_delay=0,
        )

    return build


@pytest.fixture
async def notely_app(app_factory: Callable[[], NotelyApp]) -> AsyncGenerator[NotelyApp, None]:
    app = app_factory()
    yield app
    await app.close()


@pytest.fixture
def logged_in(fake_server: FakeNotelyServer) -> Callable[..., dict[str, Any]]:
    """
    Start a session for a seeded user in an app.

    Usage:
        user = logged_in(notely_app)
        user = logged_in(notely_app, onboarded=False)
    """

    def login(app: NotelyApp, **user_fields: Any) -> dict[str, Any]:
        user = fake_server.register_user(**user_fields)
        token = fake_server.issue_token(user["id"])
        app.session.set_auth(User.model_validate(user), token)
        return user

    return login


@pytest.fixture
def make_note() -> Callable[..., Note]:
    """
    Factory for Note records.

    Usage:
        note = make_note("1", is_pinned=True)
    """

    def build(note_id: str = "1", **fields: Any) -> Note:
        created = fields.pop("date_created", datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
        updated = fields.pop("last_updated", created + timedelta(minutes=5))
        values = {
            "title": f"Note {note_id}",
            "synopsis": "Synopsis",
            "content": "Content",
            **fields,
        }
        return Note(id=note_id, date_created=created, last_updated=updated, **values)

    return build


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
