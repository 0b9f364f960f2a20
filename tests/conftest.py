"""Shared fixtures for the chat gateway test suite.

Settings evaluate at import time, so configuration env vars are pinned here
before any app module is imported. OPENAI_API_KEY is read per request and is
managed per test by the `api_key` fixture instead.
"""
import os

os.environ.setdefault("OPENAI_BASE_URL", "https://llm.test/v1")
os.environ.setdefault("RATE_LIMIT_WINDOW_MS", "60000")
os.environ.setdefault("RATE_LIMIT_MAX_REQUESTS", "20")

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from app.rate_limiter import rate_limiter

TEST_API_KEY = "sk-test-key"


@pytest.fixture
def api_key(monkeypatch):
    """Configure the completion-provider credential for one test."""
    monkeypatch.setenv("OPENAI_API_KEY", TEST_API_KEY)
    return TEST_API_KEY


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def mock_upstream():
    """Patch the completion provider external dependency.

    Only app.upstream is mocked; we cannot call a real LLM in tests.
    Everything else (routing, rate limiting, parsing, sanitization, persona
    injection, error mapping) is real.

    Yields the mock dict so tests can assert what was forwarded upstream
    (e.g. inspect the CompletionRequest passed to create_completion).
    """
    mocks = {
        "init_client": MagicMock(),
        "close_client": AsyncMock(),
        "create_completion": AsyncMock(return_value="hi there"),
    }
    with patch.multiple("app.upstream", **mocks):
        yield mocks


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset the process-wide rate table between tests.

    Without this, requests from one test count against the budget of the
    next (it's a module-level singleton and every test client shares an IP).
    """
    rate_limiter._windows.clear()


@pytest_asyncio.fixture
async def client(mock_upstream):
    """httpx.AsyncClient using ASGITransport: bypasses lifespan.

    The lifespan opens the real upstream client and starts the sweep task,
    which we don't want in tests. mock_upstream handles the provider.
    """
    import httpx
    from main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
