"""
Platform resolver registry.

Maps a search-results URL to the resolver that owns it and answers the two
questions the router asks about a search URL: is it eligible for first-result
refinement, and what keyword was searched.
"""
import logging
from typing import Dict, List, Optional
from urllib.parse import SplitResult, parse_qs, urlsplit

from ..http_client import HttpFetcher
from ..models import RoutingSettings
from ..urls import is_host_allowed
from .base import PlatformResolver
from .bilibili import BilibiliResolver
from .douyin import DouyinResolver
from .reddit import RedditResolver
from .tiktok import TikTokResolver
from .xiaohongshu import XiaohongshuResolver
from .youtube import YouTubeResolver

logger = logging.getLogger(__name__)

# Hosts whose search keyword can be read but which have no resolver
KEYWORD_ONLY_HOSTS: Dict[str, str] = {
    "x.com": "q",
}

RESOLVER_CLASSES = [
    BilibiliResolver,
    RedditResolver,
    YouTubeResolver,
    TikTokResolver,
    DouyinResolver,
    XiaohongshuResolver,
]


def _split(url: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(str(url or "").strip())
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    return parts


class PlatformRegistry:
    """Holds one resolver instance per supported platform."""

    def __init__(self, fetcher: HttpFetcher, resolvers: Optional[List[PlatformResolver]] = None):
        self.fetcher = fetcher
        self.resolvers: List[PlatformResolver] = (
            resolvers if resolvers is not None else [cls(fetcher) for cls in RESOLVER_CLASSES]
        )
        logger.info(f"Registered platform resolvers: {[r.name for r in self.resolvers]}")

    def resolver_for_host(self, host: str) -> Optional[PlatformResolver]:
        host = (host or "").lower()
        for resolver in self.resolvers:
            if resolver.matches_host(host):
                return resolver
        return None

    def resolver_for_url(self, url: str) -> Optional[PlatformResolver]:
        """Resolver for a search-results URL, or None when the URL is not a supported search page."""
        parts = _split(url)
        if parts is None:
            return None
        host = parts.hostname.lower()
        resolver = self.resolver_for_host(host)
        if resolver is None or not resolver.is_search_path(host, parts.path or ""):
            return None
        return resolver

    def is_search_url_eligible(self, url: str, settings: RoutingSettings) -> bool:
        parts = _split(url)
        if parts is None or not is_host_allowed(parts.hostname, settings.allowed_domains):
            return False
        return self.resolver_for_url(url) is not None

    def extract_search_keyword(self, url: str) -> str:
        parts = _split(url)
        if parts is None:
            return ""
        host = parts.hostname.lower()
        resolver = self.resolver_for_host(host)
        if resolver is not None:
            return resolver.extract_keyword(parts)
        for domain, param in KEYWORD_ONLY_HOSTS.items():
            if host == domain or host.endswith(f".{domain}"):
                values = parse_qs(parts.query).get(param)
                return values[0].strip() if values else ""
        return ""
