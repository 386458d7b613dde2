"""Logging setup: JSON lines for deployed runs, plain text for a terminal."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

# Attributes providers attach through ``extra=``
CONTEXT_FIELDS = ("provider", "source", "records", "skipped", "duration_s", "run_id")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Attach a single stderr handler to the ``identity_sync`` logger tree.

    ``fmt`` is "json" (default) or "text". Unknown levels fall back to INFO.
    """
    handler = logging.StreamHandler(sys.stderr)
    if fmt.lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())

    root = logging.getLogger("identity_sync")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False
