"""
Data models for routing settings, resolution stages, AI decisions and the API.
"""
from enum import IntEnum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .urls import DEFAULT_API_ENDPOINT, DEFAULT_ALLOWED_DOMAINS, normalize_allowed_domains, normalize_endpoint


class Stage(IntEnum):
    """Confidence rank of a navigation proposal."""
    NONE = 0
    FALLBACK = 1
    NON_AI = 2
    AI = 3
    DIRECT = 4

    @property
    def label(self) -> str:
        return {
            Stage.NONE: "none",
            Stage.FALLBACK: "fallback",
            Stage.NON_AI: "nonAi",
            Stage.AI: "ai",
            Stage.DIRECT: "direct",
        }[self]


class RoutingSettings(BaseModel):
    """
    Snapshot of user configuration consumed by one routing session.

    Validators apply the same normalization the settings editor does, so a
    snapshot built from partial or malformed input is always usable.
    """

    api_endpoint: str = DEFAULT_API_ENDPOINT
    model: str = "deepseek-chat"
    prefer_exact_keyword_jump: bool = True
    open_first_result_on_supported_search: bool = True
    enable_debug_logs: bool = False
    fallback_search_engine: Literal["google", "bing"] = "google"
    allowed_domains: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_DOMAINS))
    keywords: Dict[str, str] = Field(default_factory=dict)

    route_timeout_seconds: float = 10.0
    resolver_timeout_seconds: float = 4.5
    tracking_tag: str = "DirectGO"

    model_config = ConfigDict(frozen=True)

    @field_validator("api_endpoint", mode="before")
    @classmethod
    def _endpoint(cls, value):
        return normalize_endpoint(value)

    @field_validator("fallback_search_engine", mode="before")
    @classmethod
    def _engine(cls, value):
        return "bing" if value == "bing" else "google"

    @field_validator("allowed_domains", mode="before")
    @classmethod
    def _domains(cls, value):
        return normalize_allowed_domains(value)

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, value):
        if not isinstance(value, dict):
            return {}
        keywords: Dict[str, str] = {}
        for key, template in value.items():
            key = str(key or "").strip().lower()
            template = str(template or "").strip()
            if key and template:
                keywords[key] = template
        return keywords


class AiDecision(BaseModel):
    """Decision returned by the remote intent classifier."""

    type: Literal["direct", "search", "unknown"]
    url: Optional[str] = None


class NavigationRecord(BaseModel):
    """One navigation performed by a routing session."""

    stage: str
    url: str


class RouteRequest(BaseModel):
    """Raw query from the input surface."""

    text: str
    target_id: Optional[str] = None


class RouteResponse(BaseModel):
    """Outcome of a routing session."""

    text: str
    target_id: Optional[str] = None
    stage: str
    url: Optional[str] = None
    fallback_url: str
    navigations: List[NavigationRecord] = []


class FirstResultRequest(BaseModel):
    """Search-results URL to refine into a first-result deep link."""

    search_url: str
    text: Optional[str] = None


class FirstResultResponse(BaseModel):
    search_url: str
    eligible: bool
    url: Optional[str] = None
