"""
Pydantic models for aggregated statistics and error payloads.

JSON shapes served by the API:
  UserStats:     {"username": "...", "name": "...", "totalStars": 0, ..., "totalPRs": 0}
  LanguageStats: {"Python": 61.2, "Go": 38.8}   (descending by percentage)
  Error:         {"error": "..."}
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# language name -> percentage of bytes (two decimals), insertion-ordered
LanguageStats = dict[str, float]


class UserStats(BaseModel):
    """Immutable so a cached instance can be handed out as-is."""

    username: str
    name: str
    total_stars: int = Field(0, ge=0)
    total_forks: int = Field(0, ge=0)
    total_repos: int = Field(0, ge=0)
    public_repos: int = Field(0, ge=0)
    private_repos: int = Field(0, ge=0)
    followers: int = Field(0, ge=0)
    following: int = Field(0, ge=0)
    total_commits: int = Field(0, ge=0)
    total_issues: int = Field(0, ge=0)
    total_prs: int = Field(0, ge=0, alias="totalPRs")

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}


class AuthIdentity(BaseModel):
    """The account that owns the configured token."""

    login: str

    model_config = {"frozen": True}

    def matches(self, username: str) -> bool:
        return self.login.lower() == username.lower()


class ErrorResponse(BaseModel):
    error: str
