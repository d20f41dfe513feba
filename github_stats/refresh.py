"""
Background cache warmer.

Every ``interval`` seconds the configured account's private-scope user and
language statistics are recomputed and written under the same cache keys the
request path reads. Failures are logged and the loop keeps going; nothing
depends on the warmer having run.
"""

from __future__ import annotations

import asyncio
import logging

from github_stats.aggregator import StatsAggregator

logger = logging.getLogger("github_stats.refresh")


async def warm_cache(aggregator: StatsAggregator, username: str) -> None:
    """Recompute both summaries for ``username`` with private access."""
    await aggregator.user_stats(username, include_private=True, force=True)
    await aggregator.language_stats(username, include_private=True, force=True)
    logger.info("Refreshed cached stats", extra={"username": username})


async def refresh_loop(
    aggregator: StatsAggregator, username: str, interval: float
) -> None:
    """Run ``warm_cache`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await warm_cache(aggregator, username)
        except Exception:
            logger.exception("Scheduled refresh failed", extra={"username": username})
