"""
Ranking of video search results against a creator-oriented query.

Used by the Bilibili resolver when the user asks for a creator's latest
upload and the search API returns several candidates.
"""
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from ..query_optimizer import is_creator_intent

_HTML_TAG = re.compile(r"<[^>]*>")

SECONDS_PER_DAY = 60 * 60 * 24


def strip_html(text: Any) -> str:
    return _HTML_TAG.sub("", str(text or ""))


def item_author(item: Dict[str, Any]) -> str:
    author = item.get("author")
    if not author:
        owner = item.get("owner")
        author = owner.get("name") if isinstance(owner, dict) else ""
    return str(author or "").strip()


def item_url(item: Dict[str, Any]) -> str:
    """Canonical video URL for a search item, or "" when it has neither arcurl nor bvid."""
    arcurl = item.get("arcurl")
    url = arcurl.strip() if isinstance(arcurl, str) else ""
    if url.startswith(("http://", "https://")):
        return url
    bvid = item.get("bvid")
    bvid = bvid.strip() if isinstance(bvid, str) else ""
    return f"https://www.bilibili.com/video/{bvid}" if bvid else ""


@dataclass
class SearchCandidate:
    """A scored search result."""
    url: str
    author: str
    title: str
    pubdate: int
    score: int


def _pubdate(item: Dict[str, Any]) -> int:
    try:
        return int(float(item.get("pubdate") or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


def score_candidate(item: Dict[str, Any], raw_keyword: str, optimized_keyword: str, creator_name: str) -> SearchCandidate:
    """
    Score one search result.

    Author matches against the creator weigh most, keyword matches less, and
    results are penalized when the query names a creator the author does not
    match. A small bonus derived from the publish day breaks near-ties.
    """
    title = strip_html(item.get("title"))
    author = item_author(item)

    score = 0
    if creator_name:
        if author == creator_name:
            score += 140
        elif creator_name in author:
            score += 110
        if creator_name in title:
            score += 35

    if optimized_keyword:
        if optimized_keyword in author:
            score += 55
        if optimized_keyword in title:
            score += 20

    if is_creator_intent(raw_keyword):
        if not creator_name:
            score -= 10
        elif creator_name not in author:
            score -= 25

    pubdate = _pubdate(item)
    score += min(20, max(0, (pubdate // SECONDS_PER_DAY) % 20))

    return SearchCandidate(url=item_url(item), author=author, title=title, pubdate=pubdate, score=score)


def _prefer(best: SearchCandidate, candidate: SearchCandidate, creator_name: str, latest: bool) -> bool:
    if latest and creator_name:
        best_ok = creator_name in best.author
        candidate_ok = creator_name in candidate.author
        if candidate_ok != best_ok:
            return candidate_ok
        if candidate_ok:
            return candidate.pubdate > best.pubdate
    if candidate.score > best.score:
        return True
    return candidate.score == best.score and candidate.pubdate > best.pubdate


def select_best(
    items: Iterable[Dict[str, Any]],
    raw_keyword: str,
    optimized_keyword: str,
    creator_name: str,
    latest: bool,
) -> Optional[SearchCandidate]:
    """
    Pick the best candidate from search items.

    In latest mode a result whose author contains the creator name beats one
    that does not, and among such results the newer one wins. Otherwise the
    higher score wins, with the newer publish time as tie-break. Items
    without a resolvable URL are skipped.
    """
    best: Optional[SearchCandidate] = None
    for item in items:
        if not isinstance(item, dict):
            continue
        candidate = score_candidate(item, raw_keyword, optimized_keyword, creator_name)
        if not candidate.url:
            continue
        if best is None or _prefer(best, candidate, creator_name, latest):
            best = candidate
    return best


def score_user(user: Dict[str, Any], query: str) -> int:
    """Score a user-search hit by name similarity and follower count."""
    name = strip_html(user.get("uname") or user.get("name") or user.get("title") or "").strip()
    try:
        fans = float(user.get("fans") or 0)
    except (TypeError, ValueError):
        fans = 0.0
    if not math.isfinite(fans):
        fans = 0.0

    score = 0
    if name == query:
        score += 120
    elif name and (query in name or name in query):
        score += 80
    elif name:
        score += 10
    score += min(20, max(0, math.floor(math.log10(max(1.0, fans))) * 5))
    return score
