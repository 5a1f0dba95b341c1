"""
Unit tests for the keyword dictionary and built-in platform resolvers.
"""
import pytest

from directgo_server.local_resolvers import apply_template, resolve_builtin_platform_search, resolve_keyword
from directgo_server.models import RoutingSettings
from directgo_server.urls import encode_query


@pytest.fixture
def routing_settings():
    return RoutingSettings(keywords={
        "gh": "https://github.com/search?q={q}",
        "mail": "https://mail.google.com",
        "wiki": "https://en.wikipedia.org/w/index.php?search={q}&go={q}",
    })


class TestResolveKeyword:
    def test_fills_template(self, routing_settings):
        assert resolve_keyword("gh fastapi lifespan", routing_settings) == \
            "https://github.com/search?q=fastapi%20lifespan"

    def test_key_is_case_insensitive(self, routing_settings):
        assert resolve_keyword("GH fastapi", routing_settings) == "https://github.com/search?q=fastapi"

    def test_every_placeholder_replaced(self, routing_settings):
        assert resolve_keyword("wiki python", routing_settings) == \
            "https://en.wikipedia.org/w/index.php?search=python&go=python"

    def test_template_without_placeholder_is_verbatim(self, routing_settings):
        assert resolve_keyword("mail inbox", routing_settings) == "https://mail.google.com"

    def test_exact_keyword_jump(self, routing_settings):
        assert resolve_keyword("gh", routing_settings) == "https://github.com/search?q="

    def test_exact_keyword_jump_disabled(self, routing_settings):
        settings = routing_settings.model_copy(update={"prefer_exact_keyword_jump": False})
        assert resolve_keyword("gh", settings) == "https://github.com/search?q="

    @pytest.mark.parametrize("text", ["", "   ", "unknown thing"])
    def test_no_match(self, routing_settings, text):
        assert resolve_keyword(text, routing_settings) is None

    def test_apply_template_empty(self):
        assert apply_template("", "x") is None
        assert apply_template(None, "x") is None


class TestBuiltinPlatformSearch:
    @pytest.mark.parametrize("text,expected", [
        ("b站 影视飓风", f"https://search.bilibili.com/all?keyword={encode_query('影视飓风')}"),
        ("哔哩哔哩：原神", f"https://search.bilibili.com/all?keyword={encode_query('原神')}"),
        ("reddit: python", "https://www.reddit.com/search/?q=python"),
        ("Reddit python asyncio", "https://www.reddit.com/search/?q=python%20asyncio"),
        ("yt lofi", "https://www.youtube.com/results?search_query=lofi"),
        ("youtube lofi", "https://www.youtube.com/results?search_query=lofi"),
        ("tiktok dance", "https://www.tiktok.com/search?q=dance"),
        ("x elon", "https://x.com/search?q=elon"),
        ("推特 news", "https://x.com/search?q=news"),
        ("在抖音上 猫", f"https://www.douyin.com/search/{encode_query('猫')}"),
        ("小红书 穿搭", f"https://www.xiaohongshu.com/search_result?keyword={encode_query('穿搭')}"),
    ])
    def test_platform_queries(self, text, expected):
        assert resolve_builtin_platform_search(text) == expected

    @pytest.mark.parametrize("text", ["xbox games", "youtube", "b站", "python tutorial", ""])
    def test_no_match(self, text):
        assert resolve_builtin_platform_search(text) is None
