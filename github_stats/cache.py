"""
In-memory TTL cache for aggregated GitHub statistics.

Key strategy
------------
- User stats:      "user-stats-<username>-<private|public>"
- Language stats:  "lang-stats-<username>-<private|public>"
- Token identity:  "auth-user"

Entries are stamped with the cache's clock on write. A read at or after
``ttl`` seconds is a miss; stale entries are left in place until the next
``set`` for the same key overwrites them. The key space is unbounded.

There is no lock and no miss deduplication: two concurrent requests for a
cold key both compute and the later ``set`` wins.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

AUTH_USER_KEY = "auth-user"


def _visibility(include_private: bool) -> str:
    return "private" if include_private else "public"


def user_stats_key(username: str, include_private: bool) -> str:
    return f"user-stats-{username}-{_visibility(include_private)}"


def language_stats_key(username: str, include_private: bool) -> str:
    return f"lang-stats-{username}-{_visibility(include_private)}"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    timestamp: float


class TTLCache:
    """Fixed-TTL in-memory cache with an injectable clock."""

    def __init__(
        self,
        ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store: dict[str, CacheEntry] = {}
        self._clock = clock
        self.ttl = ttl

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            return None
        return entry.value

    def get_typed(self, key: str, expected: type) -> Any | None:
        """Like ``get`` but treats a value of the wrong type as a miss."""
        value = self.get(key)
        if value is not None and not isinstance(value, expected):
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._store[key] = CacheEntry(value=value, timestamp=self._clock())

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
