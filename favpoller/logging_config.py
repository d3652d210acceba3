"""Structured logging configuration for favpoller."""

import json
import logging
import sys
from datetime import UTC, datetime

# Keys passed via ``extra=`` that are copied into JSON log entries
EXTRA_FIELDS = ("method", "url", "tick")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production environments."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Appends request context (``tick=3 POST http://...``) when a record carries it.
    """

    def __init__(self):
        super().__init__(
            "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = []
        if hasattr(record, "tick"):
            context.append(f"tick={record.tick}")
        if hasattr(record, "method") and hasattr(record, "url"):
            context.append(f"{record.method} {record.url}")
        if not context:
            return line
        head, sep, rest = line.partition("\n")
        return f"{head} ({', '.join(context)}){sep}{rest}"


def setup_logging(app_env: str = "development", log_level: str = "INFO") -> None:
    """Configure root logger based on environment."""
    root = logging.getLogger()
    root.setLevel(log_level)

    # Clear existing handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if app_env == "production":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ConsoleFormatter())

    root.addHandler(handler)

    # Quieter third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
