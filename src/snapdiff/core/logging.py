"""
Logging utilities for snapdiff.

Provides human-readable and JSON-structured formatters with support for
the snapshot/source-label context attached to extraction log lines.
"""

import json
import logging
import sys
from datetime import datetime, timezone

CONTEXT_FIELDS = ("snapshot", "source_label", "key")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON-structured log lines.

    Each log line includes:
    - Standard log fields (timestamp, level, message, logger)
    - Context fields if present (snapshot, source_label, key)
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_timestamp:
            log_entry["timestamp"] = datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat()

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable log lines with snapshot context.

    Format: TIMESTAMP [LEVEL] LOGGER - MESSAGE [snapshot=X source_label=Y]
    """

    def __init__(self, include_timestamp: bool = True):
        if include_timestamp:
            fmt = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
        else:
            fmt = "[%(levelname)s] %(name)s - %(message)s"
        super().__init__(fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)

        context_parts = []
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                context_parts.append(f"{field}={value}")

        if context_parts:
            return f"{base} [{' '.join(context_parts)}]"
        return base


def configure_logging(
    level: int = logging.INFO,
    structured: bool = False,
    include_timestamp: bool = True,
) -> logging.Logger:
    """
    Configure the snapdiff package logger.

    Only adds a handler if none exist, so repeated calls (tests, CLI
    re-entry) do not duplicate output. Logs go to stderr so that report
    output on stdout stays clean.

    Args:
        level: Logging level (default: INFO)
        structured: If True, output JSON-structured logs; if False, human-readable
        include_timestamp: Whether to include timestamp in log messages

    Returns:
        The configured package logger
    """
    pkg_logger = logging.getLogger("snapdiff")
    pkg_logger.setLevel(level)

    if not pkg_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        pkg_logger.addHandler(handler)

    for handler in pkg_logger.handlers:
        handler.setLevel(level)
        if structured:
            handler.setFormatter(StructuredFormatter(include_timestamp=include_timestamp))
        else:
            handler.setFormatter(HumanReadableFormatter(include_timestamp=include_timestamp))

    return pkg_logger
