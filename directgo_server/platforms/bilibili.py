"""
Bilibili first-result resolver.

Prefers the public search API. When it returns nothing, the rendered search
page is scraped for the first BV id. For "<creator>的最新视频" style queries the
creator's own upload list is consulted before falling back to scored search
results.
"""
import logging
from typing import Any, Dict, List, Optional

from ..debug_log import debug_event
from ..http_client import FetchError
from ..query_optimizer import extract_creator_name, is_creator_intent, optimize_search_keyword, wants_latest
from ..urls import encode_query
from .base import PlatformResolver, compile_all, extract_first_match
from .scoring import item_url, score_user, select_best

logger = logging.getLogger(__name__)

SEARCH_HOST = "search.bilibili.com"
VIDEO_URL = "https://www.bilibili.com/video/{bvid}"
VIDEO_SEARCH_API = "https://api.bilibili.com/x/web-interface/search/type?search_type=video&keyword={q}"
USER_SEARCH_API = "https://api.bilibili.com/x/web-interface/search/type?search_type=bili_user&keyword={q}&order=totalrank"
UPLOADS_API = "https://api.bilibili.com/x/space/arc/search?mid={mid}&ps=1&pn=1&order=pubdate"
SEARCH_PAGE = "https://search.bilibili.com/all?keyword={q}"

API_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Referer": "https://www.bilibili.com/",
}

BVID_PATTERNS = compile_all([
    r'"bvid"\s*:\s*"(BV[a-zA-Z0-9]+)"',
    r"https://www\.bilibili\.com/video/(BV[a-zA-Z0-9]+)",
    r"//www\.bilibili\.com/video/(BV[a-zA-Z0-9]+)",
])

MAX_RESULTS = 5


def _result_list(data: Any) -> List[Dict[str, Any]]:
    try:
        results = data["data"]["result"]
    except (KeyError, TypeError):
        return []
    if not isinstance(results, list):
        return []
    return [item for item in results[:MAX_RESULTS] if isinstance(item, dict)]


class BilibiliResolver(PlatformResolver):
    """Resolves search.bilibili.com result pages to a single video."""

    name = "bilibili.com"
    keyword_params = ["keyword"]

    def matches_host(self, host: str) -> bool:
        return host == SEARCH_HOST

    def is_search_path(self, host: str, path: str) -> bool:
        return host == SEARCH_HOST and (path.startswith("/all") or path.startswith("/video"))

    async def fetch_video_results(self, keyword: str) -> List[Dict[str, Any]]:
        """Top search API results; empty when the API fails or finds nothing."""
        url = VIDEO_SEARCH_API.format(q=encode_query(keyword))
        try:
            data = await self.fetcher.get_json(url, headers=API_HEADERS)
        except FetchError as e:
            logger.warning(f"Bilibili search API failed: {e}")
            return []
        return _result_list(data)

    async def resolve_from_search_page(self, keyword: str) -> Optional[str]:
        try:
            html = await self.fetcher.get_text(SEARCH_PAGE.format(q=encode_query(keyword)))
        except FetchError as e:
            logger.warning(f"Bilibili search page failed: {e}")
            return None
        bvid = extract_first_match(html, BVID_PATTERNS)
        return VIDEO_URL.format(bvid=bvid) if bvid else None

    async def resolve_latest_upload(self, creator: str) -> Optional[str]:
        """Find the best-matching user for ``creator`` and return their newest upload."""
        q = (creator or "").strip()
        if not q:
            return None

        users = _result_list(await self.fetcher.get_json(USER_SEARCH_API.format(q=encode_query(q))))
        best_mid = None
        best_score = None
        for user in users:
            score = score_user(user, q)
            if best_score is None or score > best_score:
                best_mid, best_score = user.get("mid"), score
        if not best_mid:
            return None

        data = await self.fetcher.get_json(UPLOADS_API.format(mid=encode_query(str(best_mid))))
        try:
            bvid = data["data"]["list"]["vlist"][0]["bvid"]
        except (KeyError, IndexError, TypeError):
            return None
        bvid = bvid.strip() if isinstance(bvid, str) else ""
        return VIDEO_URL.format(bvid=bvid) if bvid else None

    async def resolve(self, keyword: str, raw_text: str, latest: bool) -> Optional[str]:
        q = (keyword or "").strip()
        if not q:
            return None

        results = await self.fetch_video_results(q)

        creator_raw = extract_creator_name(raw_text, q)
        creator = optimize_search_keyword(creator_raw) or creator_raw
        latest_mode = wants_latest(raw_text) and is_creator_intent(raw_text)
        debug_event("bilibili.resolve.start", raw=raw_text, keyword=q, creator=creator, latest=latest_mode)

        if not results:
            debug_event("bilibili.resolve.apiEmptyFallbackHtml", keyword=q)
            return await self.resolve_from_search_page(q)

        if latest_mode and creator:
            try:
                upload = await self.resolve_latest_upload(creator)
            except FetchError as e:
                logger.warning(f"Bilibili upload lookup failed for {creator!r}: {e}")
                upload = None
            if upload:
                debug_event("bilibili.resolve.latestFromUser", creator=creator, url=upload)
                return upload

        if not latest_mode:
            url = item_url(results[0]) or None
            debug_event("bilibili.resolve.firstResult", url=url)
            return url

        best = select_best(results, raw_text, q, creator, latest_mode)
        debug_event(
            "bilibili.resolve.scored",
            creator=creator,
            keyword=q,
            chosen=None if best is None else {"author": best.author, "score": best.score, "url": best.url},
        )
        return best.url if best else None
