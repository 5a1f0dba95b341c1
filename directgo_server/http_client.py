"""
Shared HTTP fetch layer.

Wraps one lazily created aiohttp session. Every failure (transport error,
non-success status, undecodable body) surfaces as ``FetchError`` so callers
have a single exception to degrade on.
"""
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36"
)


class FetchError(Exception):
    """Raised when a request fails or returns a non-success status."""

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        self.url = url
        self.status = status
        super().__init__(f"{message} ({url})" if status is None else f"HTTP {status}: {message} ({url})")


class InvalidPayloadError(FetchError):
    """Raised when a successful response body cannot be decoded."""


class HttpFetcher:
    """Read-only GET / JSON POST client used by the classifier and content resolvers."""

    def __init__(self, timeout: float = 10.0, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self.session

    async def close(self):
        """Close aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        payload: Any = None,
        timeout: Optional[float] = None,
    ) -> str:
        session = await self._get_session()
        kwargs: Dict[str, Any] = {"headers": headers or {}}
        if payload is not None:
            kwargs["json"] = payload
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)
        try:
            async with session.request(method, url, **kwargs) as response:
                body = await response.text()
                if not 200 <= response.status < 300:
                    raise FetchError(url, body[:200], status=response.status)
                return body
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(url, f"{type(e).__name__}: {e}") from e

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        return await self._request("GET", url, headers=headers)

    async def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        return _decode_json(url, await self._request("GET", url, headers=headers))

    async def post_json(
        self,
        url: str,
        payload: Any,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        body = await self._request("POST", url, headers=headers, payload=payload, timeout=timeout)
        return _decode_json(url, body)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


def _decode_json(url: str, body: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise InvalidPayloadError(url, f"invalid JSON body: {e}") from e
