"""
Structured logging for the Talent Analyzer API.

- Production: one JSON object per line, GCP Cloud Logging field names
- Development / test: human-readable lines for the terminal

Request context (username, client, cache status, timings) is attached with
`logger.info(..., extra={...})` and rendered by both formatters.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Keys accepted through `extra=` and surfaced in the output
CONTEXT_FIELDS = ("username", "client", "cache", "analysis_id", "duration_ms")

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore", "google_genai")

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _context(record: logging.LogRecord) -> dict:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """JSON log formatter for GCP Cloud Logging compatibility."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        context = _context(record)
        if context:
            log_entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ContextFormatter(logging.Formatter):
    """Plain formatter that appends `key=value` context pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"
        return line


def setup_logging(environment: str | None = None, log_level: str | None = None) -> None:
    """
    Configure the root logger.

    Called from the app lifespan with validated settings; falls back to the
    ENVIRONMENT / LOG_LEVEL variables when called without arguments.
    """
    environment = (environment or os.getenv("ENVIRONMENT", "development")).lower()
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Uvicorn reload re-runs the lifespan
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if environment == "production":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ContextFormatter(PLAIN_FORMAT, datefmt=PLAIN_DATEFMT))
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
