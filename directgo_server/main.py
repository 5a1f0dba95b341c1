"""
DirectGO Server - query intent resolution and navigation
Main FastAPI application exposing the query router over HTTP.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import SettingsProvider, settings
from .debug_log import is_debug_logging_enabled, recent_debug_events
from .http_client import HttpFetcher
from .models import FirstResultRequest, FirstResultResponse, RouteRequest, RouteResponse
from .navigation import Navigator, create_navigator
from .orchestrator import QueryRouter
from .platforms import resolve_first_result

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler(settings.log_file) if settings.log_file else logging.StreamHandler(),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# Global instances
settings_provider: Optional[SettingsProvider] = None
navigator: Optional[Navigator] = None
query_router: Optional[QueryRouter] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global settings_provider, navigator, query_router

    # Startup
    logger.info("Starting DirectGO Server...")

    settings_provider = SettingsProvider(settings)
    navigator = create_navigator(settings.navigator)
    logger.info(f"Navigator backend: {navigator.name}")

    try:
        query_router = QueryRouter(
            settings_provider=settings_provider,
            navigator=navigator,
            fetcher=HttpFetcher(timeout=settings.route_timeout_seconds),
        )
        logger.info(f"Query router initialized with model: {settings.model}")
    except Exception as exc:
        logger.error(f"Failed to initialize query router: {exc}", exc_info=True)
        query_router = None

    if not settings.api_key:
        logger.warning("No API key configured - AI classification disabled")

    yield

    # Shutdown
    logger.info("Shutting down DirectGO Server...")
    if query_router:
        await query_router.close()


# Create FastAPI app
app = FastAPI(
    title="DirectGO Server",
    description="Routes free-text queries to the most specific destination URL",
    version="0.1.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_router() -> QueryRouter:
    if not query_router:
        raise HTTPException(status_code=503, detail="Query router not available")
    return query_router


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "DirectGO Server",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    navigator_healthy = await navigator.health_check() if navigator else False
    api_key = await settings_provider.get_api_key() if settings_provider else ""
    return {
        "status": "healthy" if query_router and navigator_healthy else "degraded",
        "navigator": navigator.name if navigator else None,
        "ai_classifier": "configured" if api_key else "disabled",
    }


@app.post("/route", response_model=RouteResponse)
async def route(request: RouteRequest):
    """
    Route one query.

    Runs a full routing session (local resolvers, AI classifier, first-result
    refinement, timeout) and reports where it ended up.
    """
    router = _require_router()
    session = await router.route_query(request.text, request.target_id)
    return RouteResponse(
        text=session.text,
        target_id=session.target_id,
        stage=session.stage.label,
        url=session.current_url,
        fallback_url=session.fallback,
        navigations=session.navigations,
    )


@app.post("/resolve/first-result", response_model=FirstResultResponse)
async def resolve_first(request: FirstResultRequest):
    """Resolve a supported platform search URL to its first result."""
    router = _require_router()
    current = await router.settings_provider.get_settings()
    eligible = router.registry.is_search_url_eligible(request.search_url, current)
    url = None
    if eligible:
        url = await resolve_first_result(request.search_url, current, request.text, router.registry)
    return FirstResultResponse(search_url=request.search_url, eligible=eligible, url=url)


@app.get("/debug/logs")
async def debug_logs():
    """Recent structured debug events (empty unless debug logging is enabled)."""
    return {
        "enabled": is_debug_logging_enabled(),
        "events": recent_debug_events(),
    }


@app.post("/settings/reload")
async def reload_settings():
    """Re-read environment configuration; applies to sessions started afterwards."""
    if not settings_provider:
        raise HTTPException(status_code=503, detail="Settings not available")
    snapshot = settings_provider.reload()
    return snapshot.model_dump()
