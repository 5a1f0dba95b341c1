"""
Unit tests for the remote AI intent classifier.

The HTTP layer is mocked; no model endpoint is contacted.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from directgo_server.ai_classifier import (
    AiClassifier,
    AiRequestError,
    SYSTEM_PROMPT,
    decide_by_ai,
    parse_decision,
    strip_code_fences,
)
from directgo_server.http_client import FetchError, InvalidPayloadError
from directgo_server.models import RoutingSettings

from conftest import FakeFetcher, completion

COMPLETIONS_URL = "https://api.deepseek.com/v1/chat/completions"


def _mock_fetcher(**kwargs):
    fetcher = MagicMock()
    fetcher.post_json = AsyncMock(**kwargs)
    return fetcher


class TestParseDecision:
    """Model output is validated and normalized before it can be used."""

    def test_direct(self):
        decision = parse_decision('{"type":"direct","url":"https://github.com"}')
        assert decision.type == "direct"
        assert decision.url == "https://github.com/"

    def test_search_with_code_fence(self):
        content = '```json\n{"type":"search","url":"https://www.youtube.com/results?search_query=lofi"}\n```'
        decision = parse_decision(content)
        assert decision.type == "search"
        assert decision.url == "https://www.youtube.com/results?search_query=lofi"

    def test_http_upgraded(self):
        assert parse_decision('{"type":"direct","url":"http://example.com"}').url == "https://example.com/"

    @pytest.mark.parametrize("content", [
        "not json",
        "",
        "[1, 2]",
        '{"type":"search"}',
        '{"type":"maybe","url":"https://a.com"}',
        '{"type":"direct","url":42}',
        '{"type":"direct","url":"javascript:alert(1)"}',
        '{"type":"search","url":"https://www.google.com/search?q=x"}',
        '{"type":"search","url":"https://www.bing.com/search?q=x"}',
        '{"type":"unknown"}',
    ])
    def test_degrades_to_unknown(self, content):
        decision = parse_decision(content)
        assert decision.type == "unknown"
        assert decision.url is None

    def test_strip_code_fences(self):
        assert strip_code_fences("```\n{}\n```") == "{}"
        assert strip_code_fences("  {}  ") == "{}"


class TestAiClassifier:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        """The request carries model, both prompts and the bearer key."""
        fetcher = _mock_fetcher(return_value=completion('{"type":"direct","url":"https://github.com"}'))
        settings = RoutingSettings(model="test-model", route_timeout_seconds=3.0)

        decision = await AiClassifier(fetcher).decide("github", settings, "sk-test")

        assert decision.type == "direct"
        fetcher.post_json.assert_awaited_once()
        args, kwargs = fetcher.post_json.call_args
        assert args[0] == COMPLETIONS_URL
        body = args[1]
        assert body["model"] == "test-model"
        assert body["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert '"github"' in body["messages"][1]["content"]
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["timeout"] == 3.0

    @pytest.mark.asyncio
    async def test_custom_endpoint(self):
        fetcher = FakeFetcher({
            "https://llm.local/v1/chat/completions": completion('{"type":"unknown"}'),
        })
        settings = RoutingSettings(api_endpoint="https://llm.local/v1/")
        decision = await decide_by_ai("anything", settings, "key", fetcher)
        assert decision.type == "unknown"
        assert fetcher.urls() == ["https://llm.local/v1/chat/completions"]

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        fetcher = _mock_fetcher(side_effect=FetchError(COMPLETIONS_URL, "unauthorized", status=401))
        with pytest.raises(AiRequestError) as exc_info:
            await AiClassifier(fetcher).decide("github", RoutingSettings(), "bad-key")
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_non_json_body_is_unknown(self):
        fetcher = _mock_fetcher(side_effect=InvalidPayloadError(COMPLETIONS_URL, "invalid JSON body"))
        decision = await AiClassifier(fetcher).decide("github", RoutingSettings(), "key")
        assert decision.type == "unknown"

    @pytest.mark.asyncio
    async def test_missing_choices_is_unknown(self):
        fetcher = _mock_fetcher(return_value={"error": "overloaded"})
        decision = await AiClassifier(fetcher).decide("github", RoutingSettings(), "key")
        assert decision.type == "unknown"
