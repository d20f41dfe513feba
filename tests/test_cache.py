"""Tests for github_stats.cache — TTL semantics with a fake clock."""

from github_stats.cache import (
    AUTH_USER_KEY,
    TTLCache,
    language_stats_key,
    user_stats_key,
)
from github_stats.models import AuthIdentity, UserStats


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_round_trip_within_ttl():
    clock = FakeClock()
    cache = TTLCache(ttl=3600, clock=clock)
    value = {"Python": 100.0}
    cache.set("k", value)
    clock.advance(3599.9)
    assert cache.get("k") is value


def test_missing_key_is_none():
    assert TTLCache(clock=FakeClock()).get("nope") is None


def test_expiry_is_inclusive_at_ttl():
    clock = FakeClock()
    cache = TTLCache(ttl=3600, clock=clock)
    cache.set("k", "v")
    clock.advance(3600)
    assert cache.get("k") is None


def test_expired_entry_is_kept_until_overwritten():
    clock = FakeClock()
    cache = TTLCache(ttl=10, clock=clock)
    cache.set("k", "old")
    clock.advance(20)
    assert cache.get("k") is None
    assert len(cache) == 1

    cache.set("k", "new")
    assert len(cache) == 1
    assert cache.get("k") == "new"


def test_set_restamps_entry():
    clock = FakeClock()
    cache = TTLCache(ttl=10, clock=clock)
    cache.set("k", 1)
    clock.advance(8)
    cache.set("k", 2)
    clock.advance(8)
    assert cache.get("k") == 2


def test_get_typed_rejects_wrong_type():
    cache = TTLCache(clock=FakeClock())
    cache.set(AUTH_USER_KEY, AuthIdentity(login="octocat"))
    assert cache.get_typed(AUTH_USER_KEY, AuthIdentity).login == "octocat"
    assert cache.get_typed(AUTH_USER_KEY, UserStats) is None


def test_clear():
    cache = TTLCache(clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0
    assert cache.get("a") is None


def test_key_helpers_separate_visibility():
    assert user_stats_key("octocat", False) == "user-stats-octocat-public"
    assert user_stats_key("octocat", True) == "user-stats-octocat-private"
    assert language_stats_key("octocat", False) == "lang-stats-octocat-public"
    assert language_stats_key("octocat", True) == "lang-stats-octocat-private"
