"""
Unit tests for search keyword optimization and intent heuristics.
"""
import pytest

from directgo_server.query_optimizer import (
    extract_creator_name,
    is_creator_intent,
    optimize_search_keyword,
    strip_platform_prefix,
    wants_latest,
)


class TestOptimizeSearchKeyword:
    """Free text is reduced to the keyword a platform search should receive."""

    @pytest.mark.parametrize("raw,expected", [
        ("在b站上 周杰伦的最新视频", "周杰伦"),
        ("B站 影视飓风最新视频", "影视飓风"),
        ("抖音 猫咪的视频", "猫咪"),
        ("latest video of MrBeast", "MrBeast"),
        ("the newest posts from NASA", "NASA"),
        ("MrBeast's latest video", "MrBeast"),
        ("MrBeast latest uploads", "MrBeast"),
        ("linus tech tips latest", "linus tech tips"),
        ("reddit: python", "python"),
        ("on youtube lofi music", "lofi music"),
        ('"python asyncio"', "python asyncio"),
        ("'Bohemian Rhapsody'", "Bohemian Rhapsody"),
        ("python 教程", "python"),
        ("cute cats videos", "cute cats"),
    ])
    def test_optimizes(self, raw, expected):
        assert optimize_search_keyword(raw) == expected

    def test_ascii_platform_needs_word_boundary(self):
        """A word that merely starts with a platform alias is left alone."""
        assert optimize_search_keyword("xbox games") == "xbox games"

    def test_apostrophe_inside_word_kept(self):
        assert optimize_search_keyword("rock'n'roll") == "rock'n'roll"

    def test_too_short_result_returns_original(self):
        assert optimize_search_keyword("b站") == "b站"
        assert optimize_search_keyword(" a ") == "a"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_input(self, raw):
        assert optimize_search_keyword(raw) == ""

    def test_never_empty_for_non_empty_input(self):
        for raw in ["x", "在", "latest", "的视频", "reddit:"]:
            assert optimize_search_keyword(raw) != ""


class TestIntentHeuristics:
    def test_strip_platform_prefix(self):
        assert strip_platform_prefix("在小红书里 穿搭") == "穿搭"
        assert strip_platform_prefix("in reddit python") == "python"

    @pytest.mark.parametrize("raw,expected", [
        ("周杰伦最近视频", True),
        ("周杰伦的最新作品", True),
        ("MrBeast Most Recent upload", True),
        ("newest iphone", True),
        ("python asyncio", False),
        ("", False),
    ])
    def test_wants_latest(self, raw, expected):
        assert wants_latest(raw) is expected

    def test_extract_creator_name(self):
        assert extract_creator_name("影视飓风的最新视频") == "影视飓风"
        assert extract_creator_name("影视飓风最近投稿") == "影视飓风"
        assert extract_creator_name("MrBeast latest videos") == "MrBeast"
        assert extract_creator_name("latest video by MrBeast") == "MrBeast"

    def test_extract_creator_name_falls_back(self):
        assert extract_creator_name("python asyncio", " fallback ") == "fallback"
        assert extract_creator_name("python asyncio") == ""

    @pytest.mark.parametrize("raw,expected", [
        ("影视飓风的视频", True),
        ("影视飓风最新动态", True),
        ("MrBeast's videos", True),
        ("MrBeast latest videos", False),
        ("python tutorial", False),
    ])
    def test_is_creator_intent(self, raw, expected):
        assert is_creator_intent(raw) is expected

    def test_creator_intent_always_has_a_name(self):
        for raw in ["影视飓风的视频", "影视飓风最新动态", "MrBeast's latest videos"]:
            assert is_creator_intent(raw)
            assert extract_creator_name(raw) != ""
