"""Structured Logging — JSON formatter and setup for bridge observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (tool_name, error_code, argv, exit_code, duration_ms) surfaced when present
    - Handler writes to stderr: the MCP stdio surface owns stdout

Design Decisions:
    - JSONFormatter on stdlib logging; no formatter dependency
    - setup_logging called once on startup (FastAPI lifespan or MCP main)
"""

import json
import logging
import sys
from datetime import datetime, timezone


EXTRA_FIELDS = ("tool_name", "error_code", "argv", "exit_code", "duration_ms")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging; repeated calls replace the bridge handler."""
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name("parallels_bridge")
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == "parallels_bridge":
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
