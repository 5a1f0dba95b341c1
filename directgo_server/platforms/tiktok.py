"""TikTok first-video resolver."""
from .base import HtmlPatternResolver, compile_all


class TikTokResolver(HtmlPatternResolver):
    name = "tiktok.com"
    keyword_params = ["q"]
    search_url_template = "https://www.tiktok.com/search?q={q}"
    base_url = "https://www.tiktok.com"
    result_patterns = compile_all([
        r'(https://www\.tiktok\.com/@[^"\\]+/video/\d+)',
        r'(/@[^"\\]+/video/\d+)',
    ])

    def is_search_path(self, host: str, path: str) -> bool:
        return path.startswith("/search")
