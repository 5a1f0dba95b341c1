"""YouTube first-video resolver; scrapes the results page for a video id."""
from .base import HtmlPatternResolver, compile_all

# sp=CAI%3D sorts by upload date; the value is percent-encoded once more in the URL
LATEST_FILTER = "&sp=CAI%253D"


class YouTubeResolver(HtmlPatternResolver):
    name = "youtube.com"
    keyword_params = ["search_query"]
    search_url_template = "https://www.youtube.com/results?search_query={q}"
    result_patterns = compile_all([r'"videoId":"([a-zA-Z0-9_-]{11})"'])

    def is_search_path(self, host: str, path: str) -> bool:
        return path.startswith("/results")

    def build_search_url(self, keyword: str, latest: bool) -> str:
        url = super().build_search_url(keyword, latest)
        return url + LATEST_FILTER if latest else url

    def build_result_url(self, match: str) -> str:
        return f"https://www.youtube.com/watch?v={match}"
