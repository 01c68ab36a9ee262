"""JSON log lines tagged with the current request id."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .correlation import get_request_id

_configured_level = logging.INFO


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            payload["requestId"] = request_id

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            payload.update(record.extra_fields)

        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> None:
    """Set the level used by every marina logger, existing and future."""
    global _configured_level
    _configured_level = logging.getLevelName(level.upper())
    if not isinstance(_configured_level, int):
        _configured_level = logging.INFO
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("marina") and isinstance(logger, logging.Logger):
            logger.setLevel(_configured_level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger that writes JSON lines to stdout."""
    logger = logging.getLogger(name)

    # Attach once; modules call this at import time.
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(_configured_level)
        logger.propagate = False

    return logger
