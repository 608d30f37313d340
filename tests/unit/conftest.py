"""
Unit Test Fixtures.

Fixtures for unit tests. The remote API is always the in-memory fake from
the root conftest; nothing here opens a real network connection.
"""

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import httpx
import pytest

from notely.client.api import NotelyAPI
from notely.client.http import APIClient
from notely.core.config import get_app_config
from notely.stores.notes import NoteStore
from notely.stores.persistence import LocalStorage, TokenStorage
from notely.stores.session import SessionStore
from notely.sync.notes import NoteSync
from notely.sync.query_cache import QueryCache


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def tokens(storage: LocalStorage) -> TokenStorage:
    return TokenStorage(storage)


@pytest.fixture
def note_store(storage: LocalStorage) -> NoteStore:
    return NoteStore(storage)


@pytest.fixture
def session_store(storage: LocalStorage, tokens: TokenStorage, note_store: NoteStore) -> SessionStore:
    return SessionStore(storage, tokens, note_store)


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
async def api_client(
    fake_server,
    tokens: TokenStorage,
    session_store: SessionStore,
) -> AsyncGenerator[APIClient, None]:
    """
    APIClient wired to the fake server and the session store.

    Usage:
        async def test_request(api_client, fake_server):
            response = await api_client.get("/entries")
    """
    client = APIClient(
        base_url=fake_server.base_url,
        timeout=5.0,
        tokens=tokens,
        on_unauthorized=session_store.expire,
        transport=httpx.MockTransport(fake_server.handle),
    )
    yield client
    await client.close()


@pytest.fixture
def api(api_client: APIClient) -> NotelyAPI:
    return NotelyAPI(api_client, get_app_config().application.api.endpoints)


@pytest.fixture
def query_cache() -> QueryCache:
    """Read cache with retries enabled but no delay between them."""
    return QueryCache(retry_attempts=2, retry_delay=0)


@pytest.fixture
def note_sync(api: NotelyAPI, note_store: NoteStore, query_cache: QueryCache) -> NoteSync:
    return NoteSync(api, note_store, query_cache)


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.warning.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
