"""Reddit first-post resolver backed by the public search.json endpoint."""
from typing import Optional

from ..urls import encode_query
from .base import PlatformResolver, absolutize

SEARCH_API = "https://www.reddit.com/search.json?q={q}&limit=1&type=link"
BASE_URL = "https://www.reddit.com"


class RedditResolver(PlatformResolver):
    name = "reddit.com"
    keyword_params = ["q"]
    user_agent = "DirectGO/0.1"

    def is_search_path(self, host: str, path: str) -> bool:
        return path.startswith("/search")

    async def resolve(self, keyword: str, raw_text: str, latest: bool) -> Optional[str]:
        q = (keyword or "").strip()
        if not q:
            return None

        url = SEARCH_API.format(q=encode_query(q))
        if latest:
            url += "&sort=new"
        data = await self.fetcher.get_json(url, headers={"User-Agent": self.user_agent})
        try:
            permalink = data["data"]["children"][0]["data"]["permalink"]
        except (KeyError, IndexError, TypeError):
            return None
        permalink = permalink.strip() if isinstance(permalink, str) else ""
        if not permalink:
            return None
        return absolutize(permalink, BASE_URL)
