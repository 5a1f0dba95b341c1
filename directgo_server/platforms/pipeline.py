"""
First-result refinement: search-results URL in, single content URL out.

Failures of any kind (ineligible URL, network error, timeout, nothing found,
result outside the allowlist) resolve to None so callers keep the search URL.
"""
import asyncio
import logging
from typing import Optional
from urllib.parse import urlsplit

from ..debug_log import debug_event
from ..http_client import FetchError
from ..models import RoutingSettings
from ..query_optimizer import optimize_search_keyword, wants_latest
from ..urls import is_host_allowed
from .registry import PlatformRegistry

logger = logging.getLogger(__name__)


def _upgrade_to_https(url: str) -> str:
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


async def resolve_first_result(
    search_url: str,
    settings: RoutingSettings,
    raw_text: Optional[str],
    registry: PlatformRegistry,
) -> Optional[str]:
    """
    Resolve an eligible search-results URL to its best single result.

    Args:
        search_url: Search-results page URL
        settings: Routing settings snapshot (allowlist, resolver timeout)
        raw_text: Original query text; the URL keyword is used when absent
        registry: Platform resolvers

    Returns:
        Absolute https URL on an allowed host, or None
    """
    if not registry.is_search_url_eligible(search_url, settings):
        return None
    resolver = registry.resolver_for_url(search_url)
    if resolver is None:
        return None

    keyword = registry.extract_search_keyword(search_url)
    raw_for_intent = str(raw_text or keyword or "").strip()
    optimized = optimize_search_keyword(raw_for_intent)
    if not optimized:
        return None
    latest = wants_latest(raw_for_intent)

    debug_event("firstResult.start", platform=resolver.name, raw=raw_for_intent, keyword=optimized, latest=latest)
    try:
        resolved = await asyncio.wait_for(
            resolver.resolve(optimized, raw_for_intent, latest),
            timeout=settings.resolver_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(f"{resolver.name} resolver timed out after {settings.resolver_timeout_seconds}s")
        return None
    except FetchError as e:
        logger.warning(f"{resolver.name} resolver request failed: {e}")
        return None
    except Exception as e:
        logger.error(f"{resolver.name} resolver failed: {e}", exc_info=True)
        return None

    debug_event("firstResult.done", platform=resolver.name, url=resolved or "")
    if not resolved:
        return None

    resolved = _upgrade_to_https(resolved)
    try:
        host = urlsplit(resolved).hostname
    except ValueError:
        return None
    if not is_host_allowed(host, settings.allowed_domains):
        logger.info(f"Discarding first result outside allowed domains: {resolved}")
        return None
    return resolved
