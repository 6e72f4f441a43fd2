"""
Structured Logging Configuration Module

Ledger operations log through `log_action`, which attaches an action, the
resource acted on (``account:AC001``, ``interest_rule:RULE01``) and a dict of
details to the record. Both formatters render those fields; JSON is the
default output, text is meant for a developer's terminal.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional


STRUCTURED_FIELDS = ("action", "resource", "extra")
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _structured_fields(record: logging.LogRecord) -> dict:
    fields = {}
    for name in STRUCTURED_FIELDS:
        value = getattr(record, name, None)
        if value:
            fields[name] = value
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }
        entry.update(_structured_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain lines with the structured fields appended as key=value pairs"""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record):
        line = super().format(record)
        fields = _structured_fields(record)
        details = fields.pop("extra", {})
        pairs = [f"{key}={value}" for key, value in fields.items()]
        pairs.extend(f"{key}={value}" for key, value in details.items())
        if not pairs:
            return line
        # Keep the traceback, if any, after the key=value pairs
        head, sep, tail = line.partition("\n")
        return f"{head} [{' '.join(pairs)}]{sep}{tail}"


FORMATTERS = {
    "json": JSONFormatter,
    "text": TextFormatter,
}


def setup_logging(level: str = "INFO", logger_name: str = "bank_ledger",
                  fmt: str = "json") -> logging.Logger:
    """
    Route the package logger to stderr.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the root logger for the package
        fmt: Key of FORMATTERS; unknown values fall back to JSON

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(FORMATTERS.get(fmt, JSONFormatter)())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "bank_ledger") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Log a ledger action with structured fields.

    The record is attributed to the caller, not to this helper.
    """
    fields = {"action": action, "resource": resource, "extra": extra}
    logger.log(
        getattr(logging, level.upper()),
        message,
        extra={key: value for key, value in fields.items() if value},
        stacklevel=2
    )
