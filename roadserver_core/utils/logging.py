"""Logging setup - Text and JSON log formatting.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

ROOT_LOGGER = "roadserver_core"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(data)


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Install a stream handler on the package logger.

    Args:
        level: Log level name
        fmt: "text" or "json"
        stream: Output stream (default: stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())

    # Replace handlers from a previous call
    for handler in list(logger.handlers):
        if getattr(handler, "_roadserver", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler._roadserver = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    return logger


__all__ = [
    "JSONFormatter",
    "configure_logging",
]
