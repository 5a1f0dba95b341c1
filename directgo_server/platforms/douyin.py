"""Douyin first-video resolver."""
from urllib.parse import SplitResult, unquote

from .base import HtmlPatternResolver, compile_all

SEARCH_MARKER = "/search/"


class DouyinResolver(HtmlPatternResolver):
    name = "douyin.com"
    keyword_params = ["keyword", "q"]
    search_url_template = "https://www.douyin.com/search/{q}"
    base_url = "https://www.douyin.com"
    result_patterns = compile_all([
        r"(https://www\.douyin\.com/video/\d+)",
        r"(/video/\d+)",
    ])

    def is_search_path(self, host: str, path: str) -> bool:
        return path.startswith("/search")

    def extract_keyword(self, url: SplitResult) -> str:
        """Query parameters first, then the path segment after ``/search/``."""
        keyword = super().extract_keyword(url)
        if keyword:
            return keyword
        path = url.path or ""
        idx = path.find(SEARCH_MARKER)
        if idx < 0:
            return ""
        segment = path[idx + len(SEARCH_MARKER):].split("/", 1)[0]
        return unquote(segment).strip()
