"""
API integration tests — all GitHub calls fully mocked with respx.
No real HTTP traffic leaves this process.
"""

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from github_stats.main import app, state
from github_stats.settings import settings

API = "https://api.github.com"


@pytest.fixture(autouse=True)
def _reset_state(monkeypatch):
    """Reset shared state between tests so cache doesn't leak."""
    monkeypatch.setattr(settings, "refresh_enabled", False)
    monkeypatch.setattr(settings, "github_token", "test-token")
    state.github_client = None
    state.cache = None
    state.aggregator = None
    yield
    state.github_client = None
    state.cache = None
    state.aggregator = None


# ── Mock Data ──────────────────────────────────────────────────
def _profile(login: str) -> dict:
    return {
        "login": login,
        "name": None,
        "public_repos": 2,
        "followers": 11,
        "following": 1,
    }


def _repos(login: str) -> list[dict]:
    return [
        {"name": "alpha", "owner": {"login": login}, "stargazers_count": 5, "forks_count": 1, "fork": False, "private": False},
        {"name": "beta", "owner": {"login": login}, "stargazers_count": 10, "forks_count": 2, "fork": False, "private": False},
    ]


@pytest.fixture
def github_mock():
    """respx router for api.github.com; unused routes are allowed."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


def _mock_github(mock: respx.MockRouter, login: str = "x") -> dict[str, respx.Route]:
    """Register respx mocks for a successful GitHub flow for ``login``."""
    routes = {
        "user": mock.get(f"{API}/users/{login}").mock(
            return_value=httpx.Response(200, json=_profile(login))
        ),
        "repos": mock.get(f"{API}/users/{login}/repos").mock(
            return_value=httpx.Response(200, json=_repos(login))
        ),
        "auth_repos": mock.get(f"{API}/user/repos").mock(
            return_value=httpx.Response(200, json=[])
        ),
        "me": mock.get(f"{API}/user").mock(
            return_value=httpx.Response(200, json={"login": "token-owner"})
        ),
        "commits": mock.get(f"{API}/search/commits").mock(
            return_value=httpx.Response(200, json={"items": [{}] * 9})
        ),
        "issues": mock.get(f"{API}/search/issues").mock(
            return_value=httpx.Response(200, json={"items": [{}] * 2})
        ),
        "alpha_langs": mock.get(f"{API}/repos/{login}/alpha/languages").mock(
            return_value=httpx.Response(200, json={"A": 300})
        ),
        "beta_langs": mock.get(f"{API}/repos/{login}/beta/languages").mock(
            return_value=httpx.Response(200, json={"B": 700})
        ),
    }
    return routes


# ── JSON endpoints ─────────────────────────────────────────────
def test_api_stats_end_to_end(github_mock):
    _mock_github(github_mock, "x")

    with TestClient(app) as client:
        resp = client.get("/api/stats", params={"username": "x"})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.headers["cache-control"] == "public, max-age=3600"
    data = resp.json()
    assert data["totalStars"] == 15
    assert data["totalForks"] == 3
    assert data["totalRepos"] == 2
    assert data["username"] == "x"
    assert data["name"] == "x"
    assert data["totalCommits"] == 9
    assert data["totalIssues"] == 2
    assert data["totalPRs"] == 2
    assert data["privateRepos"] == 0


def test_api_languages_percentages(github_mock):
    _mock_github(github_mock, "x")

    with TestClient(app) as client:
        resp = client.get("/api/languages", params={"username": "x"})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {"B": 70.0, "A": 30.0}
    assert list(resp.json()) == ["B", "A"]


def test_public_request_does_not_touch_authenticated_endpoints(github_mock):
    routes = _mock_github(github_mock, "x")

    with TestClient(app) as client:
        client.get("/api/stats", params={"username": "x", "private": "false"})

    assert not routes["auth_repos"].called
    assert not routes["me"].called


def test_private_flag_requires_literal_true(github_mock):
    routes = _mock_github(github_mock, "x")

    with TestClient(app) as client:
        client.get("/api/stats", params={"username": "x", "private": "yes"})
        assert not routes["me"].called

        client.get("/api/stats", params={"username": "x", "private": "true"})
        assert routes["me"].called
        # token owner is someone else, so the public listing is still used
        assert not routes["auth_repos"].called


# ── SVG endpoints ──────────────────────────────────────────────
def test_stats_svg_defaults_to_configured_user(github_mock):
    routes = _mock_github(github_mock, settings.default_username)

    with TestClient(app) as client:
        default = client.get("/stats")
        explicit = client.get("/stats", params={"username": settings.default_username})

    assert default.status_code == 200
    assert default.headers["content-type"] == "image/svg+xml"
    assert default.headers["cache-control"] == "public, max-age=3600"
    assert default.text == explicit.text
    assert f"{settings.default_username}'s GitHub Stats" in default.text
    # second request was served from cache
    assert routes["user"].call_count == 1


def test_languages_svg(github_mock):
    _mock_github(github_mock, "x")

    with TestClient(app) as client:
        resp = client.get("/languages", params={"username": "x"})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/svg+xml"
    assert "Most Used Languages" in resp.text
    assert ">70%<" in resp.text


# ── Errors / routing ───────────────────────────────────────────
def test_unknown_route_returns_404_json():
    with TestClient(app) as client:
        resp = client.get("/nonexistent")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}
    assert resp.headers["access-control-allow-origin"] == "*"


def test_profile_failure_returns_500(github_mock):
    github_mock.get(f"{API}/users/ghost").mock(
        return_value=httpx.Response(404, json={"message": "Not Found"})
    )

    with TestClient(app) as client:
        resp = client.get("/api/stats", params={"username": "ghost"})

    assert resp.status_code == 500
    body = resp.json()
    assert "not found" in body["error"].lower()
    assert resp.headers["access-control-allow-origin"] == "*"


# ── CORS ───────────────────────────────────────────────────────
def test_options_returns_empty_200_with_cors_headers():
    with TestClient(app) as client:
        resp = client.options("/stats")

    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-allow-methods"] == "GET, OPTIONS"
    assert resp.headers["access-control-allow-headers"] == "Content-Type"


def test_successful_responses_carry_cors_and_request_id(github_mock):
    _mock_github(github_mock, "x")

    with TestClient(app) as client:
        resp = client.get("/api/languages", params={"username": "x"})

    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-allow-methods"] == "GET, OPTIONS"
    assert len(resp.headers["x-request-id"]) == 12


# ── Username validation ────────────────────────────────────────
def test_dot_segment_username_is_rejected_before_any_github_call(github_mock):
    routes = _mock_github(github_mock, "x")
    routes["auth_repos"].mock(
        return_value=httpx.Response(
            200,
            json=[{"name": "secret", "owner": {"login": "owner"}, "stargazers_count": 7, "private": True, "fork": False}],
        )
    )

    with TestClient(app) as client:
        for path in ("/api/stats", "/api/languages", "/stats", "/languages"):
            resp = client.get(path, params={"username": "../user"})
            assert resp.status_code == 400
            assert "invalid github username" in resp.json()["error"].lower()
            assert resp.headers["access-control-allow-origin"] == "*"

    assert not routes["auth_repos"].called
    assert not routes["me"].called
    assert github_mock.calls.call_count == 0


def test_username_with_slash_is_rejected(github_mock):
    _mock_github(github_mock, "x")

    with TestClient(app) as client:
        resp = client.get("/api/stats", params={"username": "x/repos"})

    assert resp.status_code == 400
    assert github_mock.calls.call_count == 0


# ── Render failures ────────────────────────────────────────────
def test_render_failure_returns_json_500(github_mock, monkeypatch):
    _mock_github(github_mock, "x")

    def broken_render(stats):
        raise RuntimeError("template exploded")

    monkeypatch.setattr("github_stats.main.render_stats_svg", broken_render)

    with TestClient(app) as client:
        resp = client.get("/stats", params={"username": "x"})

    assert resp.status_code == 500
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {"error": "template exploded"}
