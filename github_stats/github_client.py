"""
Async GitHub REST API client.

Features:
- httpx.AsyncClient with explicit connect/read timeouts.
- Link-header pagination at 100 items per page.
- 403/429 rate-limit detection (reads X-RateLimit-Reset header).
- No retries: every failure surfaces as a ``GitHubError`` subclass and the
  caller decides whether it is fatal.
"""

from __future__ import annotations

import datetime as _dt
import logging
from typing import Any
from urllib.parse import quote

import httpx

from github_stats.settings import settings

logger = logging.getLogger("github_stats.github_client")

PER_PAGE = 100


# ── Custom exceptions ──────────────────────────────────────────
class GitHubError(Exception):
    """Base for GitHub-related errors."""


class NotFoundError(GitHubError):
    """404 — user or repository doesn't exist (or isn't visible to the token)."""


class RateLimitError(GitHubError):
    """403/429 — rate limit exceeded."""

    def __init__(self, message: str, reset_timestamp: int | None = None):
        super().__init__(message)
        self.reset_timestamp = reset_timestamp


class UpstreamError(GitHubError):
    """5xx, unexpected status, or a transport failure."""


# ── Helpers ─────────────────────────────────────────────────────
def _rate_limit_reset(response: httpx.Response) -> int | None:
    """Extract X-RateLimit-Reset header (unix timestamp) if present."""
    val = response.headers.get("x-ratelimit-reset")
    if val:
        try:
            return int(val)
        except ValueError:
            pass
    return None


def _check_rate_limit(response: httpx.Response) -> None:
    """Raise RateLimitError if response indicates rate limiting."""
    if response.status_code in (403, 429):
        remaining = response.headers.get("x-ratelimit-remaining")
        # GitHub returns 403 with remaining=0 when rate-limited
        if response.status_code == 429 or remaining == "0":
            reset_ts = _rate_limit_reset(response)
            hint = " Try again later."
            if reset_ts:
                reset_dt = _dt.datetime.fromtimestamp(reset_ts, tz=_dt.timezone.utc)
                hint = f" Try again after {reset_dt:%Y-%m-%d %H:%M:%S} UTC."
            raise RateLimitError(
                f"GitHub rate limit hit.{hint}",
                reset_timestamp=reset_ts,
            )


def _segment(value: str) -> str:
    """Percent-encode one path segment; dot segments would be collapsed by httpx."""
    if value in ("", ".", ".."):
        raise ValueError(f"Invalid path segment: '{value}'")
    return quote(value, safe="")


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or response.reason_phrase
    except ValueError:
        return response.reason_phrase


# ── Client ──────────────────────────────────────────────────────
class GitHubClient:
    """Async GitHub REST API wrapper."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        token: str | None = None,
    ) -> None:
        token = token if token is not None else settings.github_token
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "github-stats-cards/1.0",
            "X-GitHub-Api-Version": settings.github_api_version,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = client or httpx.AsyncClient(
            base_url=settings.github_api_base,
            headers=headers,
            timeout=httpx.Timeout(
                connect=settings.http_connect_timeout,
                read=settings.http_read_timeout,
                write=settings.http_read_timeout,
                pool=settings.http_read_timeout,
            ),
        )

    # ── Low-level request ──────────────────────────────────────
    async def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """GET ``path`` (relative or absolute URL) once and classify the outcome."""
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"GitHub request to {path} failed: {exc}") from exc

        _check_rate_limit(resp)

        if resp.status_code == 404:
            raise NotFoundError(f"GitHub resource not found: {path}")
        if resp.status_code >= 400:
            raise UpstreamError(
                f"GitHub returned {resp.status_code} for {path}: {_error_message(resp)}"
            )
        return resp

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        resp = await self._request(path, params)
        return resp.json()

    async def _paginate(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        items_key: str | None = None,
    ) -> list[Any]:
        """Collect every page of a list endpoint by following ``rel="next"``.

        Search endpoints wrap their results in an object; pass
        ``items_key="items"`` for those.
        """
        results: list[Any] = []
        url: str | None = path
        query: dict[str, Any] | None = {**(params or {}), "per_page": PER_PAGE}
        pages = 0
        while url:
            resp = await self._request(url, query)
            body = resp.json()
            results.extend(body.get(items_key, []) if items_key else body)
            pages += 1
            url = resp.links.get("next", {}).get("url")
            # the next link already carries the full query string
            query = None
        logger.debug("Fetched %d item(s) from %s in %d page(s)", len(results), path, pages)
        return results

    # ── Users ──────────────────────────────────────────────────
    async def get_authenticated_user(self) -> dict[str, Any]:
        return await self._get_json("/user")

    async def get_user(self, username: str) -> dict[str, Any]:
        return await self._get_json(f"/users/{_segment(username)}")

    # ── Repositories ───────────────────────────────────────────
    async def list_user_repos(self, username: str) -> list[dict[str, Any]]:
        """Public repositories owned by ``username``."""
        return await self._paginate(f"/users/{_segment(username)}/repos")

    async def list_authenticated_repos(self) -> list[dict[str, Any]]:
        """Every repository the token owner owns, private ones included."""
        return await self._paginate(
            "/user/repos",
            {"affiliation": "owner", "visibility": "all"},
        )

    async def fetch_languages(self, owner: str, repo: str) -> dict[str, int]:
        return await self._get_json(f"/repos/{_segment(owner)}/{_segment(repo)}/languages")

    # ── Search ─────────────────────────────────────────────────
    async def count_commits(self, username: str) -> int:
        items = await self._paginate(
            "/search/commits", {"q": f"author:{username}"}, items_key="items"
        )
        return len(items)

    async def count_issues(self, username: str) -> int:
        return await self._count_issue_search(username, "issue")

    async def count_pull_requests(self, username: str) -> int:
        return await self._count_issue_search(username, "pr")

    async def _count_issue_search(self, username: str, kind: str) -> int:
        items = await self._paginate(
            "/search/issues",
            {"q": f"author:{username} type:{kind}"},
            items_key="items",
        )
        return len(items)

    async def aclose(self) -> None:
        await self._client.aclose()
