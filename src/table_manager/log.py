"""Logging setup for the table manager process."""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

LOG_FORMAT_TEXT = "text"
LOG_FORMAT_JSON = "json"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Attributes every LogRecord has; anything else was passed via ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """JSON-formatted log lines for CloudWatch Logs Insights."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                log_entry[key] = value
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(level: str = "INFO", fmt: str = LOG_FORMAT_TEXT) -> None:
    """
    Configure the root logger with a single stderr handler.

    Args:
        level: Log level name; unknown names fall back to INFO
        fmt: ``"text"`` or ``"json"``
    """
    handler = logging.StreamHandler(sys.stderr)
    if fmt == LOG_FORMAT_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(LOG_LEVELS.get(level.upper(), logging.INFO))

    # botocore is chatty at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
