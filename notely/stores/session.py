"""
Session Store.

Single source of truth for who is logged in and the last authentication
error. Purely a client-side cache: it never calls the API. The services
that perform the network calls mutate it from their success branches.

Only the user record is persisted in the session blob. The bearer token
lives under its own key (TokenStorage) where the HTTP client reads it.
"""

from typing import Any, Iterable

from pydantic import ValidationError as PydanticValidationError

from notely.core.logging import get_logger, log_with_source
from notely.schemas.user import User
from notely.stores.notes import NoteStore
from notely.stores.persistence import LocalStorage, TokenStorage

logger = get_logger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


class SessionStore:
    """
    Current user, bearer token, loading flag and error string.

    Args:
        storage: Durable storage for the session blob
        tokens: Token storage shared with the HTTP client
        notes: Note cache cleared on logout
        key: Storage key of the session blob
    """

    def __init__(
        self,
        storage: LocalStorage | None,
        tokens: TokenStorage | None,
        notes: NoteStore,
        key: str = "auth-storage",
    ) -> None:
        self._storage = storage
        self._tokens = tokens
        self._notes = notes
        self._key = key
        self.user: User | None = None
        self.token: str | None = tokens.get() if tokens is not None else None
        self.is_loading = False
        self.error: str | None = None
        self._load()

    def _load(self) -> None:
        if self._storage is None:
            return
        blob = self._storage.read(self._key)
        if not isinstance(blob, dict) or blob.get("user") is None:
            return
        try:
            self.user = User.model_validate(blob["user"])
        except PydanticValidationError as e:
            log_with_source(logger, "store", "warning", "Discarding invalid cached user", error=str(e))

    def _persist(self) -> None:
        if self._storage is None:
            return
        self._storage.write(
            self._key,
            {"user": self.user.to_wire() if self.user is not None else None},
        )

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    def set_auth(self, user: User, token: str) -> None:
        """Replace the current user and token. The caller is trusted."""
        self.user = user
        self.token = token
        self.is_loading = False
        self.error = None
        if self._tokens is not None:
            self._tokens.set(token)
        self._persist()
        log_with_source(logger, "store", "info", "Session started", user_id=user.id)

    def update_user(self, **fields: Any) -> None:
        """
        Shallow-merge fields into the current user. No-op when logged out.

        Onboarding completion is one-way: an update that would reset
        ``has_completed_onboarding`` to False is ignored for that field.
        """
        if self.user is None:
            return
        unknown = set(fields) - set(User.model_fields)
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")
        fields.pop("id", None)
        if self.user.has_completed_onboarding and fields.get("has_completed_onboarding") is False:
            log_with_source(logger, "store", "warning", "Ignoring attempt to reset onboarding flag")
            fields.pop("has_completed_onboarding")
        if "preferences" in fields:
            fields["preferences"] = frozenset(fields["preferences"] or ())
        self.user = self.user.model_copy(update=fields)
        self._persist()

    def complete_onboarding(self, preferences: Iterable[str]) -> None:
        """Record the chosen topics and mark onboarding done. No-op when logged out."""
        if self.user is None:
            return
        self.user = self.user.model_copy(update={
            "preferences": frozenset(preferences),
            "has_completed_onboarding": True,
        })
        self._persist()
        log_with_source(logger, "store", "info", "Onboarding completed", user_id=self.user.id)

    def logout(self) -> None:
        """Forget the user and token, and wipe the cached notes."""
        user_id = self.user.id if self.user is not None else None
        self.user = None
        self.token = None
        self.error = None
        self.is_loading = False
        if self._tokens is not None:
            self._tokens.clear()
        if self._storage is not None:
            self._storage.remove(self._key)
        self._notes.clear()
        log_with_source(logger, "store", "info", "Session cleared", user_id=user_id)

    def expire(self) -> None:
        """Drop the token after the API rejected it, keeping the user record."""
        self.token = None
        self.error = SESSION_EXPIRED_MESSAGE
        if self._tokens is not None:
            self._tokens.clear()

    def set_loading(self, loading: bool) -> None:
        self.is_loading = loading

    def set_error(self, error: str | None) -> None:
        self.error = error

    def clear_error(self) -> None:
        self.error = None
