"""Logging setup for the API process.

Called once from ``imobflow.main``. Supports human-readable text and
single-line JSON output, selected with ``LOG_FORMAT``.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from .config import Settings, settings as default_settings

_NOISY_LOGGERS = (
    "aiosqlite",
    "asyncio",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
)


class JSONFormatter(logging.Formatter):
    """Single-line JSON formatter for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(config: Settings | None = None) -> None:
    """Install a single stderr handler on the root logger."""

    config = config or default_settings
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if config.log_format.lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
