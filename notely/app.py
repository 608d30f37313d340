"""
Notely Application.

Composition root: builds the storage, stores, HTTP client, API layer,
query cache, synchroniser and services, wires them together and owns
their lifetimes. Nothing in the package holds global mutable state; every
NotelyApp is an isolated client.

Usage:
    async with NotelyApp() as app:
        await app.auth.login("ada", "secret")
        await app.sync.load_notes()
"""

from pathlib import Path
from typing import Any

import httpx

from notely.client.api import NotelyAPI
from notely.client.http import APIClient
from notely.core.config import get_app_config, get_storage_dir
from notely.core.logging import get_logger, log_with_source
from notely.routing import resolve_route
from notely.services.auth import AuthService
from notely.services.media import MediaUploader
from notely.services.onboarding import OnboardingFlow
from notely.services.profile import ProfileService
from notely.services.sentiment import SentimentService
from notely.stores.notes import NoteStore
from notely.stores.persistence import LocalStorage, TokenStorage
from notely.stores.session import SessionStore
from notely.sync.notes import NoteSync
from notely.sync.query_cache import QueryCache

logger = get_logger(__name__)


class NotelyApp:
    """
    One wired-up Notely client.

    Args:
        storage_dir: Directory for persisted blobs (default from application.yaml)
        base_url: API base URL override
        transport: httpx transport for the API client (tests use MockTransport)
        uploader: Image host client override
        sentiment: Sentiment service override
        retry_delay: Read retry delay override in seconds
    """

    def __init__(
        self,
        storage_dir: Path | None = None,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        uploader: MediaUploader | None = None,
        sentiment: SentimentService | None = None,
        retry_delay: float | None = None,
    ) -> None:
        config = get_app_config()
        application = config.application
        keys = application.storage.keys

        self.storage = LocalStorage(storage_dir if storage_dir is not None else get_storage_dir())
        self.tokens = TokenStorage(self.storage, key=keys.token)
        self.notes = NoteStore(self.storage, key=keys.notes)
        self.session = SessionStore(self.storage, self.tokens, self.notes, key=keys.session)

        self.client = APIClient(
            base_url=base_url,
            tokens=self.tokens,
            on_unauthorized=self.session.expire,
            transport=transport,
        )
        self.api = NotelyAPI(self.client, application.api.endpoints)
        self.cache = QueryCache(
            retry_attempts=application.reads.retry_attempts,
            retry_delay=retry_delay if retry_delay is not None else application.reads.retry_delay_seconds,
        )
        self.sync = NoteSync(self.api, self.notes, self.cache)

        self.features = config.features
        self.auth = AuthService(self.api, self.session, self.cache)
        self.profile = ProfileService(
            self.api,
            self.session,
            uploader if uploader is not None else MediaUploader.from_config(),
            avatar_upload_enabled=self.features.avatar_upload_enabled,
        )
        self.sentiment = sentiment if sentiment is not None else SentimentService.from_config()

        log_with_source(
            logger, "services", "debug", "Application assembled",
            storage=str(self.storage.directory),
            base_url=self.client.base_url,
        )

    def onboarding(self) -> OnboardingFlow:
        """Start a fresh onboarding flow for the current user."""
        return OnboardingFlow(
            self.api,
            self.session,
            self.sync,
            first_note_enabled=self.features.onboarding_first_note_enabled,
        )

    def guard(self, path: str) -> str:
        """Route actually shown for path given the current session."""
        return resolve_route(self.session, path)

    async def close(self) -> None:
        self.cache.clear()
        await self.client.close()

    async def __aenter__(self) -> "NotelyApp":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
