"""
JSON-lines logging for the stats service.

``setup_logging()`` installs one stdout handler on the root logger (uvicorn's
loggers propagate into it). Every record passes through
``RequestContextFilter``, which stamps it with the id of the HTTP request
being served, or ``-`` for work outside a request such as the refresh task.

Aggregation code tags records with ``extra={"username": ..., "cache_key": ...,
"repo": ...}``; those keys become top-level JSON fields.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.config
import uuid
from datetime import datetime, timezone

request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default="-"
)

CONTEXT_FIELDS = ("request_id", "username", "cache_key", "repo")


class RequestContextFilter(logging.Filter):
    """Attach the current request id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(
            (field, getattr(record, field))
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        )
        if record.exc_info and record.exc_info[1]:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def setup_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_context": {"()": RequestContextFilter}},
            "formatters": {"json": {"()": JSONFormatter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "filters": ["request_context"],
                }
            },
            "root": {"level": level.upper(), "handlers": ["stdout"]},
            "loggers": {
                name: {"handlers": [], "propagate": True}
                for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
            },
        }
    )


def new_request_id() -> str:
    """Short random id for the X-Request-Id header and log lines."""
    return uuid.uuid4().hex[:12]
