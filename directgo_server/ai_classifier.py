"""
Remote AI intent classifier.

Single chat-completion call that classifies the query as a direct destination,
an on-site search, or unknown. The model must answer with strict JSON; any
other output degrades to ``unknown`` rather than an error. Only the HTTP call
itself can fail, and it does so with ``AiRequestError``.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .debug_log import debug_event
from .http_client import FetchError, HttpFetcher, InvalidPayloadError
from .models import AiDecision, RoutingSettings
from .urls import build_completions_url, is_disallowed_ai_decision_url, normalize_ai_decision_url

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a browser search-intent router. Your output must be strict JSON."

USER_PROMPT_TEMPLATE = """User input: "{text}".
Decide the user's intent and return JSON only (no extra text, no code fences):
- If the user wants to go straight to a site or service, return {{"type":"direct","url":"https://..."}}
- If the user wants to search within a site or look up content, return {{"type":"search","url":"https://..."}}
Rules:
1) url must be a complete link that can be opened directly
2) url must use https (never http)
3) If you cannot tell, return {{"type":"unknown"}}"""

UNKNOWN = AiDecision(type="unknown")

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\n?")
_FENCE_CLOSE = re.compile(r"```$")


class AiRequestError(Exception):
    """Raised when the classifier endpoint cannot be reached or answers with an error status."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


def strip_code_fences(text: str) -> str:
    trimmed = (text or "").strip()
    if not trimmed.startswith("```"):
        return trimmed
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", trimmed, count=1)).strip()


def parse_decision(content: str) -> AiDecision:
    """
    Parse the model's message content into a safe decision.

    Returns ``unknown`` for malformed JSON, a non-conforming shape, or a URL
    that fails normalization or points at a search engine.
    """
    try:
        parsed: Any = json.loads(strip_code_fences(content))
    except json.JSONDecodeError:
        logger.warning(f"Classifier returned non-JSON content: {content[:200]!r}")
        return UNKNOWN

    if not isinstance(parsed, dict):
        return UNKNOWN

    try:
        decision = AiDecision.model_validate(parsed)
    except ValidationError:
        logger.warning(f"Classifier output failed schema validation: {parsed!r}")
        return UNKNOWN

    if decision.type == "unknown" or not isinstance(decision.url, str):
        return UNKNOWN

    normalized = normalize_ai_decision_url(decision.url)
    if not normalized or is_disallowed_ai_decision_url(normalized):
        debug_event("ai.rejectedUrl", url=decision.url)
        return UNKNOWN
    return AiDecision(type=decision.type, url=normalized)


class AiClassifier:
    """Calls a chat-completions style endpoint with the routing prompt."""

    def __init__(self, fetcher: HttpFetcher, temperature: float = 0.2):
        self.fetcher = fetcher
        self.temperature = temperature

    def _build_request(self, text: str, settings: RoutingSettings) -> Dict[str, Any]:
        return {
            "model": settings.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT_TEMPLATE.format(text=text)},
            ],
            "temperature": self.temperature,
        }

    async def decide(self, text: str, settings: RoutingSettings, api_key: str) -> AiDecision:
        """
        Classify one query.

        Raises:
            AiRequestError: the endpoint failed or returned a non-success status.
        """
        url = build_completions_url(settings.api_endpoint)
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        try:
            data = await self.fetcher.post_json(
                url,
                self._build_request(text, settings),
                headers=headers,
                timeout=settings.route_timeout_seconds,
            )
        except InvalidPayloadError as exc:
            logger.warning(f"Classifier response body is not JSON: {exc}")
            return UNKNOWN
        except FetchError as exc:
            raise AiRequestError(f"AI request failed: {exc}", status=exc.status) from exc

        content = _first_choice_content(data)
        decision = parse_decision(content)
        debug_event("ai.decision", type=decision.type, url=decision.url)
        return decision


def _first_choice_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else str(content or "")


async def decide_by_ai(text: str, settings: RoutingSettings, api_key: str, fetcher: HttpFetcher) -> AiDecision:
    """Module-level convenience wrapper around ``AiClassifier.decide``."""
    return await AiClassifier(fetcher).decide(text, settings, api_key)
