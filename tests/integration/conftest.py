"""Integration test fixtures for SpeechPad.

Provides an async HTTP client over the real FastAPI app, backed by an
in-memory SQLite database, with the submission strategy swapped for one
whose provider is a mock.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from speechpad.api.app import create_app
from speechpad.api.routes.transcribe import get_strategy
from speechpad.services.storage import database
from speechpad.services.storage.object_store import LocalDiskStore
from speechpad.services.transcription import DirectSubmission
from speechpad.services.transcription.base import BaseTranscriptionProvider, ProviderTranscript


@pytest.fixture
def mock_provider():
    """Mock provider that transcribes everything as 'hello world'."""
    provider = AsyncMock(spec=BaseTranscriptionProvider)
    provider.transcribe_bytes.return_value = ProviderTranscript(id="t-123", text="hello world")
    provider.transcribe_url.return_value = ProviderTranscript(id="t-123", text="hello world")
    return provider


@pytest.fixture
def app(mock_provider, tmp_path):
    """Create a fresh FastAPI application using the mock provider."""
    app = create_app()
    app.dependency_overrides[get_strategy] = lambda: DirectSubmission(
        mock_provider, LocalDiskStore(tmp_path / "uploads")
    )
    return app


@pytest.fixture
def asgi_transport(app, db_engine):
    """ASGI transport with the test engine injected into the database module.

    Routes then use the same in-memory SQLite with tables already created.
    """
    database._engine = db_engine
    database._session_factory = None
    yield ASGITransport(app=app)
    database.reset_engine()


@pytest.fixture
async def async_client(asgi_transport):
    """AsyncClient talking to the app in-process."""
    async with AsyncClient(transport=asgi_transport, base_url="http://test") as c:
        yield c
