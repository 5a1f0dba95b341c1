"""
Local intent resolvers.

Two synchronous, network-free strategies that rank as the ``non_ai`` stage:
the user's keyword dictionary and the built-in platform-name matcher.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern

from .models import RoutingSettings
from .urls import encode_query


@dataclass(frozen=True)
class PlatformSearch:
    """A platform reachable by name, and how to build its search URL."""
    name: str
    aliases: Pattern
    build_url: Callable[[str], str]


BUILTIN_PLATFORMS: List[PlatformSearch] = [
    PlatformSearch(
        "bilibili",
        re.compile(r"^(?:b站|哔哩哔哩|bilibili)$", re.IGNORECASE),
        lambda q: f"https://search.bilibili.com/all?keyword={encode_query(q)}",
    ),
    PlatformSearch(
        "reddit",
        re.compile(r"^reddit$", re.IGNORECASE),
        lambda q: f"https://www.reddit.com/search/?q={encode_query(q)}",
    ),
    PlatformSearch(
        "youtube",
        re.compile(r"^(?:youtube|yt)$", re.IGNORECASE),
        lambda q: f"https://www.youtube.com/results?search_query={encode_query(q)}",
    ),
    PlatformSearch(
        "tiktok",
        re.compile(r"^tiktok$", re.IGNORECASE),
        lambda q: f"https://www.tiktok.com/search?q={encode_query(q)}",
    ),
    PlatformSearch(
        "x",
        re.compile(r"^(?:x|twitter|推特)$", re.IGNORECASE),
        lambda q: f"https://x.com/search?q={encode_query(q)}",
    ),
    PlatformSearch(
        "douyin",
        re.compile(r"^(?:抖音|douyin)$", re.IGNORECASE),
        lambda q: f"https://www.douyin.com/search/{encode_query(q)}",
    ),
    PlatformSearch(
        "xiaohongshu",
        re.compile(r"^(?:小红书|xiaohongshu)$", re.IGNORECASE),
        lambda q: f"https://www.xiaohongshu.com/search_result?keyword={encode_query(q)}",
    ),
]

# Optional 在, a platform alias, optional 上/里, optional separator, then the query.
# ASCII aliases must end on a word boundary so "xbox" is not read as "x box".
_PLATFORM_QUERY = re.compile(
    r"^(?:在)?\s*"
    r"(?P<platform>b站|哔哩哔哩|推特|抖音|小红书"
    r"|(?:bilibili|reddit|youtube|yt|tiktok|twitter|douyin|xiaohongshu|x)(?![A-Za-z0-9]))"
    r"(?:上|里)?\s*[:：]?\s*(?P<query>.*)$",
    re.IGNORECASE | re.DOTALL,
)


def apply_template(template: Optional[str], query: str) -> Optional[str]:
    """Replace every ``{q}`` with the encoded query; templates without it are returned verbatim."""
    if not template:
        return None
    if "{q}" in template:
        return template.replace("{q}", encode_query(query))
    return template


def resolve_keyword(text: str, settings: RoutingSettings) -> Optional[str]:
    """Look the first word up in the keyword table and fill its template with the rest."""
    raw = (text or "").strip()
    if not raw:
        return None

    parts = raw.split()
    template = settings.keywords.get(parts[0].lower())
    if not template:
        return None

    if settings.prefer_exact_keyword_jump and len(parts) == 1:
        return apply_template(template, "")
    return apply_template(template, " ".join(parts[1:]))


def resolve_builtin_platform_search(text: str) -> Optional[str]:
    """Turn "<platform>[:] <query>" into that platform's search URL."""
    raw = (text or "").strip()
    match = _PLATFORM_QUERY.match(raw)
    if not match:
        return None

    query = match.group("query").strip()
    if not query:
        return None

    platform = match.group("platform")
    for entry in BUILTIN_PLATFORMS:
        if entry.aliases.match(platform):
            return entry.build_url(query)
    return None
