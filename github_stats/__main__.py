"""Run the stats card server: ``python -m github_stats`` or ``github-stats``."""

from __future__ import annotations

import logging
import sys

import uvicorn

from github_stats.logging_config import setup_logging
from github_stats.settings import settings

logger = logging.getLogger("github_stats")


def main() -> None:
    setup_logging(settings.log_level)
    if not settings.github_token:
        logger.error("GITHUB_TOKEN environment variable is required")
        sys.exit(1)

    logger.info("Server running on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        "github_stats.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
