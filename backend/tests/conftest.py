"""
NoteBrief Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The Gemini API is replaced by httpx.MockTransport handlers, the
       database by a throwaway SQLite file (aiosqlite), and HTTP endpoints
       are driven in-process through ASGITransport.

Fixture Hierarchy (all function-scoped):
    ├── make_gemini_client: builds GeminiClients around a request handler
    ├── recording_sleep:    async sleep stand-in that records its delays
    ├── session_factory:    async_sessionmaker bound to a fresh SQLite file
    ├── mock_db_session:    AsyncMock session for failure paths
    └── test_client:        HTTPX AsyncClient talking to the FastAPI app
"""

import os
import tempfile

# Settings are read at import time: configure the environment BEFORE any
# notebrief import so tests never touch a real database or API key.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="notebrief_test_"), "test.db"
)
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Callable, List  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from notebrief.database import Base  # noqa: E402
from notebrief.models.summary import SummaryRecord  # noqa: E402,F401
from notebrief.services.gemini_client import GeminiClient  # noqa: E402

GEMINI_TEST_BASE_URL = "https://gemini.test/v1"


# ══════════════════════════════════════════════════════════════════════════
# Gemini API fakes
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def make_gemini_client():
    """
    Factory for GeminiClients whose HTTP traffic goes to a handler function.

    Usage:
        client = make_gemini_client(lambda request: httpx.Response(200, json={...}))
    """
    clients: List[GeminiClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> GeminiClient:
        client = GeminiClient(
            api_key="test-key",
            base_url=GEMINI_TEST_BASE_URL,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


class RecordingSleep:
    """Replaces asyncio.sleep; remembers every requested delay in seconds."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """async_sessionmaker bound to an empty SQLite database with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'summaries.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client():
    """
    Provides an async HTTP test client for endpoint testing.

    raise_app_exceptions=False lets the catch-all 500 handler's response
    reach the test instead of the original exception.
    """
    from notebrief.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
