"""
Base layer for platform content resolvers.

A resolver turns a search keyword into that platform's best single result
(a video, post or note URL). All resolvers inherit from PlatformResolver.
"""
import re
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Pattern
from urllib.parse import SplitResult, parse_qs

from ..http_client import HttpFetcher
from ..urls import encode_query


def extract_first_match(text: str, patterns: Iterable[Pattern]) -> Optional[str]:
    """Return group 1 of the first pattern that matches anywhere in ``text``."""
    content = str(text or "")
    for pattern in patterns:
        match = pattern.search(content)
        if match and match.group(1):
            return match.group(1)
    return None


def absolutize(url: str, base: str) -> str:
    """Resolve a site-relative path against ``base``; absolute http(s) URLs pass through."""
    if url.startswith(("http://", "https://")):
        return url
    return f"{base}{'' if url.startswith('/') else '/'}{url}"


class PlatformResolver(ABC):
    """Abstract base class for per-platform first-result resolvers."""

    name: str = ""
    keyword_params: List[str] = ["q"]

    def __init__(self, fetcher: HttpFetcher):
        self.fetcher = fetcher

    def matches_host(self, host: str) -> bool:
        """Whether this resolver owns URLs on ``host``."""
        return host == self.name or host.endswith(f".{self.name}")

    @abstractmethod
    def is_search_path(self, host: str, path: str) -> bool:
        """
        Whether ``path`` on ``host`` is this platform's search-results page.

        Args:
            host: Lower-cased hostname
            path: URL path

        Returns:
            True for a recognized search page
        """
        pass

    def extract_keyword(self, url: SplitResult) -> str:
        """Read the raw search keyword from a search-results URL."""
        params = parse_qs(url.query)
        for name in self.keyword_params:
            values = params.get(name)
            if values and values[0].strip():
                return values[0].strip()
        return ""

    @abstractmethod
    async def resolve(self, keyword: str, raw_text: str, latest: bool) -> Optional[str]:
        """
        Resolve the best result for a keyword.

        Args:
            keyword: Optimized search keyword
            raw_text: Original intent text (used for creator/latest heuristics)
            latest: Whether the user asked for the most recent content

        Returns:
            Absolute result URL, or None when nothing usable was found
        """
        pass


class HtmlPatternResolver(PlatformResolver):
    """
    Resolver for platforms without a usable public API.

    Fetches the rendered search page and applies an ordered list of regex
    patterns; the first one that matches wins.
    """

    search_url_template: str = ""
    base_url: str = ""
    result_patterns: List[Pattern] = []

    def build_search_url(self, keyword: str, latest: bool) -> str:
        return self.search_url_template.format(q=encode_query(keyword))

    def build_result_url(self, match: str) -> str:
        return absolutize(match, self.base_url)

    async def resolve(self, keyword: str, raw_text: str, latest: bool) -> Optional[str]:
        q = (keyword or "").strip()
        if not q:
            return None
        html = await self.fetcher.get_text(self.build_search_url(q, latest))
        found = extract_first_match(html, self.result_patterns)
        if not found:
            return None
        return self.build_result_url(found)


def compile_all(patterns: Iterable[str]) -> List[Pattern]:
    return [re.compile(p) for p in patterns]
