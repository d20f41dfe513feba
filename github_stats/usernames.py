"""
GitHub login validation.

A login is 1-39 characters of ASCII letters, digits and hyphens, and does
not start with a hyphen. Anything else raises ValueError with a
human-readable message before it can reach an API path.
"""

from __future__ import annotations

import re

_GITHUB_LOGIN_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9-]{0,38}")


def parse_username(username: str) -> str:
    """Return ``username`` unchanged if it is a valid GitHub login.

    Raises ``ValueError`` otherwise.
    """
    if not _GITHUB_LOGIN_RE.fullmatch(username):
        raise ValueError(
            f"Invalid GitHub username: '{username}'. "
            "Expected 1-39 letters, digits or hyphens."
        )
    return username
