"""
Notes API - Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── cache_dir: Fresh cache directory under pytest's tmp_path
    ├── settings: Settings pointing at cache_dir
    ├── note_store: NoteStore opened on cache_dir
    ├── app: FastAPI app built by create_app(settings)
    └── test_client: HTTPX AsyncClient wired to the app through ASGITransport
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notes_api.config import Settings
from notes_api.main import create_app
from notes_api.services.note_store import NoteStore

# Keep a developer's shell environment out of settings loaded by the tests
for _var in ("NOTES_HOST", "NOTES_PORT", "NOTES_CACHE", "NOTES_LOG_LEVEL"):
    os.environ.pop(_var, None)


@pytest.fixture
def cache_dir(tmp_path):
    """A cache directory that exists and is empty."""
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def settings(cache_dir):
    return Settings(host="127.0.0.1", port=3000, cache=cache_dir)


@pytest.fixture
def note_store(cache_dir):
    return NoteStore.open(cache_dir)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/notes")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
