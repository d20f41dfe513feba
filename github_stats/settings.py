"""
Centralised application settings loaded from environment variables.
Uses pydantic-settings so every value can be overridden via env vars or a .env file.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration."""

    # ── GitHub ──────────────────────────────────────────────
    github_token: str | None = None
    github_api_base: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"

    # ── HTTP client ─────────────────────────────────────────
    http_connect_timeout: float = 5.0
    http_read_timeout: float = 15.0

    # ── Cache ───────────────────────────────────────────────
    cache_ttl_seconds: int = 3600

    # ── Cards ───────────────────────────────────────────────
    default_username: str = "elyor04"

    # ── Background refresh ──────────────────────────────────
    refresh_enabled: bool = True
    refresh_username: str = "elyor04"
    refresh_interval_seconds: float = 300.0

    # ── Server ──────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    model_config = {"env_prefix": "", "env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton used across the app
settings = Settings()
