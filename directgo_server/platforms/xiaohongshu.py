"""Xiaohongshu first-note resolver."""
from .base import HtmlPatternResolver, compile_all


class XiaohongshuResolver(HtmlPatternResolver):
    name = "xiaohongshu.com"
    keyword_params = ["keyword"]
    search_url_template = "https://www.xiaohongshu.com/search_result?keyword={q}"
    base_url = "https://www.xiaohongshu.com"
    result_patterns = compile_all([
        r"(https://www\.xiaohongshu\.com/explore/[0-9a-fA-F]+)",
        r"(https://www\.xiaohongshu\.com/discovery/item/[0-9a-fA-F]+)",
        r"(/explore/[0-9a-fA-F]+)",
        r"(/discovery/item/[0-9a-fA-F]+)",
    ])

    def is_search_path(self, host: str, path: str) -> bool:
        return path.startswith("/search_result")
