"""
Configuration management for the DirectGO server.

Settings come from environment variables (prefix ``DIRECTGO_``) and an
optional ``.env`` file. ``SettingsProvider`` is what the router reads: it hands
out immutable ``RoutingSettings`` snapshots with defaults merged in, and the
API key as a separately scoped secret.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .debug_log import set_debug_logging
from .models import RoutingSettings
from .urls import DEFAULT_API_ENDPOINT, DEFAULT_ALLOWED_DOMAINS, normalize_allowed_domains

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="DIRECTGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = "directgo_server.log"

    # AI classifier
    api_key: str = ""
    api_endpoint: str = DEFAULT_API_ENDPOINT
    model: str = "deepseek-chat"

    # Routing preferences
    prefer_exact_keyword_jump: bool = True
    open_first_result_on_supported_search: bool = True
    enable_debug_logs: bool = False
    fallback_search_engine: str = "google"
    allowed_domains: List[str] = list(DEFAULT_ALLOWED_DOMAINS)
    keywords: Dict[str, str] = {}
    keywords_file: Optional[str] = None

    # Timeouts (seconds)
    route_timeout_seconds: float = 10.0
    resolver_timeout_seconds: float = 4.5

    tracking_tag: str = "DirectGO"

    # "record" keeps navigations in the session only, "browser" opens them
    navigator: Literal["record", "browser"] = "record"

    def to_routing_settings(self) -> RoutingSettings:
        keywords = dict(self.keywords)
        if self.keywords_file:
            keywords.update(load_keywords_file(self.keywords_file))
        return RoutingSettings(
            api_endpoint=self.api_endpoint,
            model=self.model,
            prefer_exact_keyword_jump=self.prefer_exact_keyword_jump,
            open_first_result_on_supported_search=self.open_first_result_on_supported_search,
            enable_debug_logs=self.enable_debug_logs,
            fallback_search_engine=self.fallback_search_engine,
            allowed_domains=self.allowed_domains,
            keywords=keywords,
            route_timeout_seconds=self.route_timeout_seconds,
            resolver_timeout_seconds=self.resolver_timeout_seconds,
            tracking_tag=self.tracking_tag,
        )


def parse_keywords(text: str) -> Dict[str, str]:
    """Parse ``key=url`` lines; blank lines and lines without a key or url are skipped."""
    keywords: Dict[str, str] = {}
    for line in str(text or "").splitlines():
        line = line.strip()
        key, sep, url = line.partition("=")
        if not sep or not key.strip():
            continue
        key = key.strip().lower()
        url = url.strip()
        if url:
            keywords[key] = url
    return keywords


def parse_domains(text: str) -> List[str]:
    """Parse one domain per line into a normalized allowlist."""
    lines = [line for line in str(text or "").splitlines() if line.strip()]
    return normalize_allowed_domains(lines)


def load_keywords_file(path: str) -> Dict[str, str]:
    keywords_path = Path(path)
    if not keywords_path.exists():
        logger.warning(f"Keywords file not found: {keywords_path}")
        return {}
    return parse_keywords(keywords_path.read_text(encoding="utf-8"))


class SettingsProvider:
    """
    Read side of the configuration collaborator.

    Sessions take a snapshot at start; later changes only flip the
    process-wide debug logging flag and apply to the next session.
    """

    def __init__(self, settings: Optional[Settings] = None, overrides: Optional[Dict[str, Any]] = None):
        self._settings = settings or Settings()
        self._overrides: Dict[str, Any] = dict(overrides or {})
        self._snapshot = self._build_snapshot()
        set_debug_logging(self._snapshot.enable_debug_logs)

    def _build_snapshot(self) -> RoutingSettings:
        try:
            base = self._settings.to_routing_settings()
        except Exception as exc:
            logger.error(f"Invalid routing settings, using defaults: {exc}", exc_info=True)
            base = RoutingSettings()
        if not self._overrides:
            return base
        return RoutingSettings(**{**base.model_dump(), **self._overrides})

    async def get_settings(self) -> RoutingSettings:
        return self._snapshot

    async def get_api_key(self) -> str:
        return (self._settings.api_key or "").strip()

    def apply_change(self, **changes: Any) -> RoutingSettings:
        """Merge changed fields (as the settings editor would save them)."""
        self._overrides.update(changes)
        self._snapshot = self._build_snapshot()
        set_debug_logging(self._snapshot.enable_debug_logs)
        logger.info(f"Settings changed: {sorted(changes)}")
        return self._snapshot

    def reload(self) -> RoutingSettings:
        """Re-read environment and ``.env``, keeping explicit overrides."""
        self._settings = Settings()
        self._snapshot = self._build_snapshot()
        set_debug_logging(self._snapshot.enable_debug_logs)
        return self._snapshot


settings = Settings()
