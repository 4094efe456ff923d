"""
Logging setup for the command line entry point.

Diagnostics always go to stderr so stdout carries nothing but the account snapshot.
"""

import json
import logging
import sys
from datetime import datetime, timezone

TEXT_FORMAT = "%(levelname)s: %(message)s"

# LogRecord attributes passed through `extra=` that belong in JSON output
EXTRA_FIELDS = ("client_id", "transaction_id", "reason")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "WARNING", log_format: str = "text", stream=None) -> logging.Logger:
    """
    Configure the root logger with a single stream handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "text" for plain lines, "json" for one object per line
        stream: Output stream, stderr when omitted

    Returns:
        The configured root logger
    """
    root = logging.getLogger()

    # Remove existing handlers to avoid duplicates
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))
    return root
