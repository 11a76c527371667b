"""Centralized logging setup and JSON formatter for structured logs."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

PACKAGE_LOGGER = "trafficreg"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else came in via ``extra=``.
_RECORD_ATTRS = {
    "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno",
    "funcName", "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "name", "message",
    "taskName", "asctime",
}


class JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects.

    Merges any `extra=` kwargs directly into the payload, e.g.
    ``log.info("Registered signal", extra={"signal_id": 7})``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        for key, value in getattr(record, "__dict__", {}).items():
            if key not in _RECORD_ATTRS:
                payload[key] = value

        # safe fallback for non-serializable objects
        return json.dumps(payload, default=str)


def configure_logging(
    level: Union[int, str] = logging.WARNING,
    log_file: Optional[Path] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Attach a single handler to the package logger.

    Calling this again replaces the previously installed handler, so the
    CLI and tests can reconfigure freely.

    Args:
        level:       Logging level name or number.
        log_file:    Append logs to this file instead of stderr.
        json_format: Use ``JsonFormatter`` rather than plain text.

    Returns:
        The configured ``trafficreg`` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(
            Path(log_file), encoding="utf-8"
        )
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(
        JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT)
    )
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger
