"""
Integration Test Fixtures.

Fixtures for integration tests - whole NotelyApp instances against the
fake API. These build on the root conftest.py fixtures; apps opened here
share one storage directory so a test can restart the client mid-flow.
"""

from collections.abc import AsyncGenerator, Callable
from contextlib import AsyncExitStack

import pytest

from notely.app import NotelyApp


@pytest.fixture
async def open_app(app_factory: Callable[[], NotelyApp]) -> AsyncGenerator[Callable[[], NotelyApp], None]:
    """
    Open NotelyApp instances that are closed after the test.

    Usage:
        async def test_restart(open_app):
            first = open_app()
            second = open_app()  # reads what first persisted
    """
    async with AsyncExitStack() as stack:

        def build() -> NotelyApp:
            app = app_factory()
            stack.push_async_callback(app.close)
            return app

        yield build
