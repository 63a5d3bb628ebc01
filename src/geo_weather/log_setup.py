"""JSON logging for the weather viewer.

Log lines go to stderr so the rich view on stdout stays readable. The
OpenWeather `appid` travels in query strings and request params, so every
message and `context` payload is passed through `redaction` first.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_params, sanitize_text


class JsonConsoleFormatter(logging.Formatter):
    """Render a record as one JSON line with `ts`, `level`, `logger` and `message`.

    Provider and startup logs pass request params or the settings summary as
    ``extra={"context": {...}}``; those are emitted under ``context`` with
    sensitive keys such as ``appid`` replaced.
    """

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            event["context"] = sanitize_params(context)
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str, ensure_ascii=False)


def setup_logger(name: str = "geo_weather", level: int | str = logging.INFO) -> logging.Logger:
    """Return the viewer logger, attaching the stderr JSON handler only once."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
