"""
FastAPI application — GitHub stats cards.

Endpoints (all GET, query: ``username`` and ``private=true|false``):
    /stats           → user stats SVG card
    /languages       → most-used languages SVG card
    /api/stats       → UserStats JSON
    /api/languages   → LanguageStats JSON
Malformed username  → 400 {"error": "..."}
Anything else       → 404 {"error": "Not found"}
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from github_stats.aggregator import StatsAggregator
from github_stats.cache import TTLCache
from github_stats.github_client import GitHubClient
from github_stats.logging_config import new_request_id, request_id_ctx, setup_logging
from github_stats.models import ErrorResponse, UserStats
from github_stats.refresh import refresh_loop
from github_stats.render import render_json, render_languages_svg, render_stats_svg
from github_stats.settings import settings
from github_stats.usernames import parse_username

logger = logging.getLogger("github_stats.main")

SVG_MEDIA_TYPE = "image/svg+xml"
JSON_MEDIA_TYPE = "application/json"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
CACHE_CONTROL = "public, max-age=3600"


# ── Shared state ───────────────────────────────────────────────
class _State:
    """Mutable container so lifespan and endpoints share instances."""
    github_client: GitHubClient | None = None
    cache: TTLCache | None = None
    aggregator: StatsAggregator | None = None
    refresh_task: asyncio.Task | None = None


state = _State()


def _ensure_state() -> StatsAggregator:
    """Lazily initialise client, cache and aggregator for TestClient compatibility."""
    if state.github_client is None:
        state.github_client = GitHubClient()
    if state.cache is None:
        state.cache = TTLCache(ttl=settings.cache_ttl_seconds)
    if state.aggregator is None:
        state.aggregator = StatsAggregator(state.github_client, state.cache)
    return state.aggregator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage client, cache and background refresh lifetime."""
    setup_logging(settings.log_level)

    state.cache = TTLCache(ttl=settings.cache_ttl_seconds)
    state.github_client = GitHubClient()
    state.aggregator = StatsAggregator(state.github_client, state.cache)

    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set — GitHub calls will be unauthenticated.")

    if settings.refresh_enabled:
        state.refresh_task = asyncio.create_task(
            refresh_loop(
                state.aggregator,
                settings.refresh_username,
                settings.refresh_interval_seconds,
            )
        )
    logger.info(
        "Application started (refresh=%s, cache_ttl=%ss)",
        settings.refresh_enabled, settings.cache_ttl_seconds,
    )
    yield

    if state.refresh_task:
        state.refresh_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await state.refresh_task
        state.refresh_task = None
    if state.github_client:
        await state.github_client.aclose()
    logger.info("Application shutdown")


app = FastAPI(
    title="GitHub Stats Cards",
    version="1.0.0",
    lifespan=lifespan,
)


# ── Middleware: CORS + request_id + timing ─────────────────────
@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    rid = new_request_id()
    request_id_ctx.set(rid)
    t0 = time.perf_counter()
    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error for %s", request.url.path)
            response = _error_response(500, str(exc))
    elapsed = round((time.perf_counter() - t0) * 1000, 1)
    response.headers.update(CORS_HEADERS)
    response.headers["X-Request-Id"] = rid
    logger.info(
        "%s %s → %s (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed,
    )
    return response


# ── Error helpers ──────────────────────────────────────────────
def _error_response(status: int, message: str) -> JSONResponse:
    """Return {"error": "..."} with the given status."""
    body = ErrorResponse(error=message)
    return JSONResponse(status_code=status, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error_response(404, "Not found")
    return _error_response(exc.status_code, str(exc.detail))


def _request_params(username: str | None, private: str | None) -> tuple[str, bool]:
    """Resolve query params; raises ValueError for a malformed username."""
    return parse_username(username or settings.default_username), private == "true"


async def _serve(
    load: Callable[[str, bool], Awaitable[Any]],
    render: Callable[[Any], str],
    media_type: str,
    username: str | None,
    private: str | None,
) -> Response:
    try:
        name, include_private = _request_params(username, private)
    except ValueError as exc:
        return _error_response(400, str(exc))

    try:
        content = render(await load(name, include_private))
    except Exception as exc:
        logger.exception("Failed to build stats", extra={"username": name})
        return _error_response(500, str(exc))
    return Response(
        content=content,
        media_type=media_type,
        headers={"Cache-Control": CACHE_CONTROL},
    )


def _user_stats_json(stats: UserStats) -> str:
    return render_json(stats.model_dump(by_alias=True))


# ── Endpoints ──────────────────────────────────────────────────
@app.get("/stats")
async def stats_card(username: str | None = None, private: str | None = None):
    aggregator = _ensure_state()
    return await _serve(
        aggregator.user_stats, render_stats_svg, SVG_MEDIA_TYPE, username, private
    )


@app.get("/languages")
async def languages_card(username: str | None = None, private: str | None = None):
    aggregator = _ensure_state()
    return await _serve(
        aggregator.language_stats, render_languages_svg, SVG_MEDIA_TYPE, username, private
    )


@app.get("/api/stats")
async def stats_json(username: str | None = None, private: str | None = None):
    aggregator = _ensure_state()
    return await _serve(
        aggregator.user_stats, _user_stats_json, JSON_MEDIA_TYPE, username, private
    )


@app.get("/api/languages")
async def languages_json(username: str | None = None, private: str | None = None):
    aggregator = _ensure_state()
    return await _serve(
        aggregator.language_stats, render_json, JSON_MEDIA_TYPE, username, private
    )
