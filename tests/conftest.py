"""
Pytest configuration and shared fixtures for DirectGO tests.
"""
import asyncio
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from directgo_server.config import Settings, SettingsProvider
from directgo_server.debug_log import set_debug_logging
from directgo_server.http_client import FetchError
from directgo_server.navigation import RecordingNavigator


class FakeFetcher:
    """
    Scripted stand-in for HttpFetcher.

    Responses are keyed by exact URL. A value may be a payload, an exception
    instance (raised), or a ``(delay_seconds, payload)`` tuple for slow
    endpoints. Unknown URLs answer 404.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[Tuple[str, str, Any]] = []
        self.closed = False

    async def _respond(self, method: str, url: str, payload: Any = None) -> Any:
        self.calls.append((method, url, payload))
        if url not in self.responses:
            raise FetchError(url, "not found", status=404)
        value = self.responses[url]
        if isinstance(value, tuple):
            delay, value = value
            await asyncio.sleep(delay)
        if isinstance(value, Exception):
            raise value
        return value

    async def get_text(self, url: str, headers=None) -> str:
        return await self._respond("GET", url)

    async def get_json(self, url: str, headers=None) -> Any:
        return await self._respond("GET", url)

    async def post_json(self, url: str, payload: Any, headers=None, timeout=None) -> Any:
        return await self._respond("POST", url, payload)

    async def close(self):
        self.closed = True

    def urls(self) -> List[str]:
        return [url for _, url, _ in self.calls]


def completion(content: str) -> Dict[str, Any]:
    """Build a chat-completions response body carrying ``content``."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_provider(api_key: str = "", **overrides: Any) -> SettingsProvider:
    """SettingsProvider that ignores the process environment and ``.env``."""
    return SettingsProvider(Settings(_env_file=None, api_key=api_key), overrides=overrides)


@pytest.fixture(autouse=True)
def reset_debug_logging():
    """Keep the process-wide debug flag from leaking between tests."""
    set_debug_logging(False)
    yield
    set_debug_logging(False)


@pytest.fixture
def fake_fetcher():
    """Provide an empty scripted fetcher."""
    return FakeFetcher()


@pytest.fixture
def navigator():
    """Provide a navigator that only records navigations."""
    return RecordingNavigator()


@pytest_asyncio.fixture
async def test_app():
    """Provide a test FastAPI app instance."""
    # Import here so logging is configured only for API tests
    from directgo_server.main import app
    return app


@pytest_asyncio.fixture
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing FastAPI endpoints."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test"
    ) as client:
        yield client
