"""
Navigation orchestrator.

Runs one routing session per query: local resolvers commit immediately, the
AI classifier and the first-result refinement race in the background, and a
session timeout guarantees the user lands somewhere. Every proposal passes
through ``RoutingSession.propose``, which only ever moves the navigation
forward in confidence rank.
"""
import asyncio
import logging
from typing import List, Optional, Set
from urllib.parse import urlsplit

from .ai_classifier import AiClassifier, AiRequestError
from .config import SettingsProvider
from .debug_log import debug_event
from .http_client import HttpFetcher
from .local_resolvers import resolve_builtin_platform_search, resolve_keyword
from .models import NavigationRecord, RoutingSettings, Stage
from .navigation import Navigator
from .platforms import PlatformRegistry, resolve_first_result
from .urls import append_from_param, fallback_url, normalize_navigable_url

logger = logging.getLogger(__name__)


def is_same_search_surface(existing_url: Optional[str], ai_url: Optional[str]) -> bool:
    """
    Whether two URLs show the same platform search page.

    Hosts must match. On search.bilibili.com any ``/all`` or ``/video`` path
    counts as the same page; elsewhere the paths must be equal.
    """
    try:
        a = urlsplit(str(existing_url or ""))
        b = urlsplit(str(ai_url or ""))
    except ValueError:
        return False
    host_a = (a.hostname or "").lower()
    host_b = (b.hostname or "").lower()
    if not host_a or host_a != host_b:
        return False
    if host_a == "search.bilibili.com":
        return a.path.startswith(("/all", "/video")) and b.path.startswith(("/all", "/video"))
    return (a.path or "") == (b.path or "")


class RoutingSession:
    """
    State of one query's resolution.

    ``stage`` and ``current_url`` are only changed by ``propose``, which never
    awaits, so concurrent stage tasks cannot interleave a commit.
    """

    def __init__(self, text: str, target_id: Optional[str], fallback: str, tracking_tag: str):
        self.text = text
        self.target_id = target_id
        self.fallback = fallback
        self.tracking_tag = tracking_tag
        self.stage = Stage.NONE
        self.current_url: Optional[str] = None
        self.local_search_url: Optional[str] = None
        self.navigations: List[NavigationRecord] = []
        self.timeout_task: Optional[asyncio.Task] = None

    def propose(self, url: Optional[str], stage: Stage) -> Optional[str]:
        """
        Apply the commit rule to a proposed navigation.

        Returns:
            The final URL to navigate to, or None when the proposal is dropped
        """
        effective = stage
        safe_url = normalize_navigable_url(url)
        if not safe_url:
            if stage == Stage.DIRECT:
                return None
            safe_url = normalize_navigable_url(self.fallback)
            effective = Stage.FALLBACK
            if not safe_url:
                return None

        if effective < self.stage:
            return None

        final_url = append_from_param(safe_url, self.tracking_tag)
        if final_url == self.current_url and effective == self.stage:
            return None

        self.stage = effective
        self.current_url = final_url
        if effective == Stage.AI:
            self.clear_timeout()
        return final_url

    def clear_timeout(self):
        if self.timeout_task is not None and not self.timeout_task.done():
            self.timeout_task.cancel()

    @property
    def local_hit(self) -> bool:
        return self.local_search_url is not None


class QueryRouter:
    """
    Resolves free-text queries into navigations.

    Collaborators: a settings provider (snapshot + API key), a navigator that
    opens URLs, and the shared HTTP fetcher used by the AI classifier and the
    platform resolvers.
    """

    def __init__(
        self,
        settings_provider: SettingsProvider,
        navigator: Navigator,
        fetcher: Optional[HttpFetcher] = None,
        classifier: Optional[AiClassifier] = None,
        registry: Optional[PlatformRegistry] = None,
    ):
        self.settings_provider = settings_provider
        self.navigator = navigator
        self.fetcher = fetcher or HttpFetcher()
        self.classifier = classifier or AiClassifier(self.fetcher)
        self.registry = registry or PlatformRegistry(self.fetcher)

    async def _load_settings(self) -> RoutingSettings:
        try:
            return await self.settings_provider.get_settings()
        except Exception as e:
            logger.error(f"Failed to read settings, using defaults: {e}", exc_info=True)
            return RoutingSettings()

    async def _load_api_key(self) -> str:
        try:
            return (await self.settings_provider.get_api_key() or "").strip()
        except Exception as e:
            logger.error(f"Failed to read API key: {e}", exc_info=True)
            return ""

    async def commit(self, session: RoutingSession, url: Optional[str], stage: Stage) -> bool:
        """Propose a URL and navigate when the session accepts it."""
        final_url = session.propose(url, stage)
        if final_url is None:
            return False
        session.navigations.append(NavigationRecord(stage=session.stage.label, url=final_url))
        try:
            await self.navigator.navigate_target(session.target_id, final_url)
        except Exception as e:
            logger.error(f"Navigation to {final_url} failed: {e}")
        return True

    async def route_query(self, text: str, target_id: Optional[str] = None) -> RoutingSession:
        """
        Route one query to a destination.

        Never raises; the returned session records the final stage, URL and
        every navigation performed.
        """
        settings = await self._load_settings()
        text = str(text or "")
        session = RoutingSession(
            text,
            target_id,
            fallback_url(text, settings.fallback_search_engine),
            settings.tracking_tag,
        )
        debug_event("routeQuery.start", text=text, target_id=target_id)

        try:
            await self._run(session, settings)
        except Exception as e:
            logger.error(f"Routing failed for {text!r}: {e}", exc_info=True)
            if session.stage == Stage.NONE:
                await self.commit(session, session.fallback, Stage.FALLBACK)
        finally:
            session.clear_timeout()

        logger.info(f"Routed {text!r} at stage {session.stage.label}: {session.current_url}")
        return session

    async def _run(self, session: RoutingSession, settings: RoutingSettings):
        literal = session.text.strip()
        if literal.startswith(("https://", "http://")):
            if normalize_navigable_url(literal):
                debug_event("routeQuery.directUrl", url=literal)
                await self.commit(session, literal, Stage.DIRECT)
            else:
                debug_event("routeQuery.directUrlBlocked", url=literal)
                await self.commit(session, session.fallback, Stage.FALLBACK)
            return

        session.timeout_task = asyncio.create_task(self._timeout(session, settings.route_timeout_seconds))
        tasks: Set[asyncio.Task] = set()

        keyword_url = resolve_keyword(session.text, settings)
        if keyword_url:
            debug_event("routeQuery.keyword", url=keyword_url)
            await self.commit(session, keyword_url, Stage.NON_AI)

        builtin_url = resolve_builtin_platform_search(session.text)
        if builtin_url:
            debug_event("routeQuery.builtIn", url=builtin_url)
            await self.commit(session, builtin_url, Stage.NON_AI)

        if session.stage == Stage.NON_AI:
            session.local_search_url = session.current_url
            if settings.open_first_result_on_supported_search and self.registry.is_search_url_eligible(
                session.current_url, settings
            ):
                raw_text = session.text if builtin_url else None
                tasks.add(asyncio.create_task(self._refine_local(session, settings, raw_text)))

        api_key = await self._load_api_key()
        if api_key:
            tasks.add(asyncio.create_task(self._ai_stage(session, settings, api_key)))
        elif not session.local_hit:
            await self.commit(session, session.fallback, Stage.FALLBACK)

        await self._join(session, tasks)

    async def _timeout(self, session: RoutingSession, seconds: float):
        await asyncio.sleep(seconds)
        debug_event("routeQuery.timeoutFallback", fallback=session.fallback)
        await self.commit(session, session.fallback, Stage.FALLBACK)

    async def _join(self, session: RoutingSession, tasks: Set[asyncio.Task]):
        """Wait for stage tasks until they finish or the session timeout fires."""
        timeout_task = session.timeout_task
        pending = set(tasks)
        while pending and not timeout_task.done():
            _, pending = await asyncio.wait(pending | {timeout_task}, return_when=asyncio.FIRST_COMPLETED)
            pending.discard(timeout_task)

        if timeout_task.done() and not timeout_task.cancelled():
            # timed out; late results are dropped
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            return

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        session.clear_timeout()
        if session.stage == Stage.NONE:
            await self.commit(session, session.fallback, Stage.FALLBACK)

    async def _ai_stage(self, session: RoutingSession, settings: RoutingSettings, api_key: str):
        try:
            decision = await self.classifier.decide(session.text, settings, api_key)
        except AiRequestError as e:
            logger.warning(f"AI classification failed: {e}")
            debug_event("routeQuery.aiError", error=str(e), status=e.status)
            if not session.local_hit:
                await self.commit(session, session.fallback, Stage.FALLBACK)
            return
        except Exception as e:
            logger.error(f"Unexpected AI classifier error: {e}", exc_info=True)
            if not session.local_hit:
                await self.commit(session, session.fallback, Stage.FALLBACK)
            return

        debug_event("routeQuery.aiDecision", type=decision.type, url=decision.url)
        if decision.type not in ("direct", "search") or not decision.url:
            if not session.local_hit:
                await self.commit(session, session.fallback, Stage.FALLBACK)
            return

        if (
            decision.type == "search"
            and session.stage == Stage.NON_AI
            and is_same_search_surface(session.local_search_url, decision.url)
        ):
            debug_event("routeQuery.aiSkip", reason="sameSearchPage", existing=session.local_search_url, ai_url=decision.url)
            return

        await self.commit(session, decision.url, Stage.AI)
        debug_event("routeQuery.aiNavigate", target=decision.url)

    async def _refine_local(self, session: RoutingSession, settings: RoutingSettings, raw_text: Optional[str]):
        search_url = session.local_search_url
        try:
            resolved = await resolve_first_result(search_url, settings, raw_text, self.registry)
        except Exception as e:
            logger.error(f"First-result refinement failed for {search_url}: {e}", exc_info=True)
            return
        if resolved:
            debug_event("routeQuery.firstResult", search_url=search_url, url=resolved)
            await self.commit(session, resolved, Stage.NON_AI)

    async def close(self):
        await self.fetcher.close()
