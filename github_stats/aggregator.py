"""
Aggregation of GitHub API results into cached summaries.

Two summaries are produced per (username, visibility) pair:

- ``UserStats``: profile counters, star/fork totals over the repository
  list, and commit / issue / PR counts from the search API.
- ``LanguageStats``: byte-weighted language percentages over the user's
  non-fork repositories.

Only the profile lookup and the repository listing are fatal. The token
identity check, the three search counts, and individual per-repository
language lookups each degrade to ``False`` / ``0`` / "skip" with a warning.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Awaitable

from github_stats.cache import (
    AUTH_USER_KEY,
    TTLCache,
    language_stats_key,
    user_stats_key,
)
from github_stats.github_client import GitHubClient
from github_stats.models import AuthIdentity, LanguageStats, UserStats

logger = logging.getLogger("github_stats.aggregator")


def language_percentages(byte_totals: dict[str, int]) -> LanguageStats:
    """Turn per-language byte counts into percentages, largest first.

    Percentages are rounded to two decimals and need not sum to exactly 100.
    An empty or all-zero input gives an empty mapping.
    """
    total = sum(byte_totals.values())
    if total <= 0:
        return {}
    percentages = {
        lang: round(100 * count / total, 2) for lang, count in byte_totals.items()
    }
    return dict(sorted(percentages.items(), key=lambda item: item[1], reverse=True))


class StatsAggregator:
    """Builds ``UserStats`` / ``LanguageStats`` and keeps them in ``cache``."""

    def __init__(self, client: GitHubClient, cache: TTLCache) -> None:
        self.client = client
        self.cache = cache

    # ── Identity / repository source ───────────────────────────
    async def is_authenticated_user(self, username: str) -> bool:
        """True when ``username`` owns the configured token.

        Failure to resolve the identity (no ``user`` scope, network error)
        is not fatal: it only restricts the request to public data.
        """
        identity = self.cache.get_typed(AUTH_USER_KEY, AuthIdentity)
        if identity is None:
            try:
                data = await self.client.get_authenticated_user()
                identity = AuthIdentity(login=data["login"])
            except Exception as exc:
                logger.warning("Could not resolve token identity: %s", exc)
                return False
            self.cache.set(AUTH_USER_KEY, identity)
        return identity.matches(username)

    async def fetch_repos(
        self, username: str, include_private: bool
    ) -> tuple[list[dict[str, Any]], bool]:
        """Return ``(repos, used_private_listing)``."""
        if include_private and await self.is_authenticated_user(username):
            return await self.client.list_authenticated_repos(), True
        return await self.client.list_user_repos(username), False

    async def _count_or_zero(self, label: str, username: str, call: Awaitable[int]) -> int:
        try:
            return await call
        except Exception as exc:
            logger.warning(
                "Could not count %s for %s: %s", label, username, exc,
                extra={"username": username},
            )
            return 0

    # ── User statistics ────────────────────────────────────────
    async def user_stats(
        self, username: str, include_private: bool = False, *, force: bool = False
    ) -> UserStats:
        key = user_stats_key(username, include_private)
        if not force:
            cached = self.cache.get_typed(key, UserStats)
            if cached is not None:
                logger.info("Cache HIT", extra={"cache_key": key})
                return cached

        user = await self.client.get_user(username)
        repos, private_listing = await self.fetch_repos(username, include_private)

        total_stars = sum(repo.get("stargazers_count") or 0 for repo in repos)
        total_forks = sum(repo.get("forks_count") or 0 for repo in repos)
        if private_listing:
            private_repos = sum(1 for repo in repos if repo.get("private"))
            public_repos = len(repos) - private_repos
        else:
            public_repos = user.get("public_repos") or 0
            private_repos = 0

        total_commits = await self._count_or_zero(
            "commits", username, self.client.count_commits(username)
        )
        total_issues = await self._count_or_zero(
            "issues", username, self.client.count_issues(username)
        )
        total_prs = await self._count_or_zero(
            "pull requests", username, self.client.count_pull_requests(username)
        )

        stats = UserStats(
            username=user["login"],
            name=user.get("name") or user["login"],
            total_stars=total_stars,
            total_forks=total_forks,
            total_repos=len(repos),
            public_repos=public_repos,
            private_repos=private_repos,
            followers=user.get("followers") or 0,
            following=user.get("following") or 0,
            total_commits=total_commits,
            total_issues=total_issues,
            total_prs=total_prs,
        )
        self.cache.set(key, stats)
        logger.info("Cache MISS → stored user stats", extra={"cache_key": key})
        return stats

    # ── Language statistics ────────────────────────────────────
    async def language_stats(
        self, username: str, include_private: bool = False, *, force: bool = False
    ) -> LanguageStats:
        key = language_stats_key(username, include_private)
        if not force:
            cached = self.cache.get_typed(key, dict)
            if cached is not None:
                logger.info("Cache HIT", extra={"cache_key": key})
                return dict(cached)

        repos, _ = await self.fetch_repos(username, include_private)

        byte_totals: Counter[str] = Counter()
        for repo in repos:
            if repo.get("fork"):
                continue
            owner = (repo.get("owner") or {}).get("login", username)
            name = repo.get("name", "")
            try:
                byte_totals.update(await self.client.fetch_languages(owner, name))
            except Exception as exc:
                logger.warning(
                    "Could not fetch languages for %s: %s", name, exc,
                    extra={"username": username, "repo": f"{owner}/{name}"},
                )

        languages = language_percentages(byte_totals)
        # the cache keeps its own mapping; callers get a copy
        self.cache.set(key, dict(languages))
        logger.info("Cache MISS → stored language stats", extra={"cache_key": key})
        return languages
