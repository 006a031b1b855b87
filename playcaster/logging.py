"""Logging configuration for Playcaster."""

import json
import logging
import sys
from datetime import datetime, timezone

from playcaster.config import get_settings


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log collectors.

    Video titles are often non-ASCII, so messages are written as UTF-8
    rather than escaped.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str | None = None) -> None:
    """Configure logging based on environment.

    Logs go to stderr so that a feed printed to stdout stays clean.
    """
    settings = get_settings()
    handler = logging.StreamHandler(sys.stderr)

    if settings.env == "prod":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel((level or settings.log_level).upper())
