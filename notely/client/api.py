"""
Notely API Endpoints.

Typed wrappers around the REST endpoints the client relies on. Paths come
from ``api.endpoints`` in application.yaml; bodies are decoded through the
canonical envelope in notely.schemas.base, so nothing here branches on
response shape.
"""

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from notely.client.http import APIClient
from notely.core.config_schema import EndpointsSchema
from notely.core.exceptions import InvalidResponseError
from notely.core.logging import get_logger, log_with_source
from notely.schemas.base import ApiEnvelope
from notely.schemas.note import Note, NoteCreate, NoteData, NoteListData, NoteUpdate
from notely.schemas.user import (
    AuthPayload,
    LoginRequest,
    PasswordChange,
    SignupRequest,
    UpdatedUserData,
    User,
)

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class NotelyAPI:
    """
    Endpoint layer over APIClient.

    Usage:
        api = NotelyAPI(client, endpoints)
        notes = await api.list_notes()
        note = await api.toggle_pin("abc")
    """

    def __init__(self, client: APIClient, endpoints: EndpointsSchema) -> None:
        self.client = client
        self.endpoints = endpoints

    def _path(self, name: str, **params: str) -> str:
        template: str = getattr(self.endpoints, name)
        return template.format(**params)

    @staticmethod
    def _decode(payload: type[T], body: Any, path: str) -> T:
        """Decode the envelope's data; a body that does not fit becomes InvalidResponseError."""
        try:
            return ApiEnvelope[payload].model_validate(body).data  # type: ignore[valid-type]
        except PydanticValidationError as e:
            log_with_source(
                logger, "api", "error", "API response did not match schema",
                path=path, errors=e.error_count(),
            )
            raise InvalidResponseError() from e

    async def _note(self, method: str, path: str, **kwargs: Any) -> Note:
        body = await self.client.call(method, path, **kwargs)
        return self._decode(NoteData, body, path).entry

    async def _notes(self, path: str, **kwargs: Any) -> list[Note]:
        body = await self.client.call("GET", path, **kwargs)
        return self._decode(NoteListData, body, path).entries

    # -------------------------------------------------------------------------
    # Auth and profile
    # -------------------------------------------------------------------------

    async def login(self, credentials: LoginRequest) -> AuthPayload:
        path = self._path("login")
        body = await self.client.call("POST", path, json=credentials.to_wire())
        return self._decode(AuthPayload, body, path)

    async def register(self, signup: SignupRequest) -> AuthPayload:
        path = self._path("register")
        body = await self.client.call("POST", path, json=signup.to_wire())
        return self._decode(AuthPayload, body, path)

    async def change_password(self, change: PasswordChange) -> None:
        await self.client.call("POST", self._path("change_password"), json=change.to_wire())

    async def update_user(self, fields: dict[str, Any]) -> User:
        """PATCH the current user with camelCase fields; returns the updated record."""
        path = self._path("user")
        body = await self.client.call("PATCH", path, json=fields)
        return self._decode(UpdatedUserData, body, path).updated_user

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    async def list_notes(self) -> list[Note]:
        return await self._notes(self._path("notes"))

    async def list_pinned_notes(self) -> list[Note]:
        return await self._notes(self._path("notes"), params={"isPinned": "true"})

    async def list_trash(self) -> list[Note]:
        return await self._notes(self._path("trash"))

    async def get_note(self, note_id: str) -> Note:
        return await self._note("GET", self._path("note", note_id=note_id))

    async def create_note(self, draft: NoteCreate) -> Note:
        return await self._note("POST", self._path("create_note"), json=draft.to_wire())

    async def update_note(self, note_id: str, update: NoteUpdate) -> Note:
        return await self._note(
            "PATCH",
            self._path("note", note_id=note_id),
            json=update.to_wire(exclude_unset=True),
        )

    async def soft_delete_note(self, note_id: str) -> Note:
        return await self.update_note(note_id, NoteUpdate(is_deleted=True))

    async def restore_note(self, note_id: str) -> Note:
        return await self.update_note(note_id, NoteUpdate(is_deleted=False))

    async def toggle_pin(self, note_id: str) -> Note:
        return await self._note("PATCH", self._path("pin_note", note_id=note_id))

    async def toggle_bookmark(self, note_id: str) -> Note:
        return await self._note("PATCH", self._path("bookmark_note", note_id=note_id))

    async def delete_note(self, note_id: str) -> None:
        """Hard delete; the record ceases to exist remotely."""
        await self.client.call("DELETE", self._path("note", note_id=note_id))
