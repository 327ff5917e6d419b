"""
Structured JSON logging for filter resolution.

Hosts that ship logs to an aggregator can switch the `media_filters`
logger tree to one JSON object per line. Request context attached by
FiltersLoggerAdapter (user_id, parent_id, ...) is lifted to top-level
keys so every line of one resolution call can be correlated.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

PACKAGE_LOGGER = "media_filters"

# Context keys emitted at the top level of each JSON line
CONTEXT_FIELDS = ("operation", "user_id", "parent_id")

# Attributes present on every LogRecord; anything else came in through `extra`
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats records as single-line JSON objects.

    Keys: timestamp (UTC, from the record), level, logger, message, the
    CONTEXT_FIELDS present on the record, any other `extra` values under
    "extra", and "exception" when exc_info is set.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            target = log_obj if key in CONTEXT_FIELDS else extra
            target[key] = _jsonable(value)
        if extra:
            log_obj["extra"] = extra

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str = PACKAGE_LOGGER,
) -> logging.Logger:
    """
    Route a logger tree to stdout as JSON lines.

    Calling this again replaces the JSON handler instead of adding a
    second one; handlers installed by the host are left alone.

    Args:
        level: Logging level (default: INFO)
        logger_name: Logger to configure (default: the package logger)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, StructuredJsonFormatter):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


class FiltersLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that tags every record with request context.

    Used by the filters service so all records of one resolution call
    carry the same user_id and parent_id.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs
