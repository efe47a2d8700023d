"""Logging Middleware - Request/response logging.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from roadserver_core.http.request import Request
from roadserver_core.http.response import Response

logger = logging.getLogger(__name__)

Next = Callable[..., None]

COMBINED_FORMAT = (
    '{remote_addr} - {remote_user} [{time}] '
    '"{method} {path} {protocol}" {status} {body_bytes} '
    '"{referer}" "{user_agent}"'
)


@dataclass
class LoggingConfig:
    """Logging middleware configuration."""

    log_headers: bool = False
    log_query: bool = True
    skip_paths: List[str] = field(default_factory=list)


def request_logger(config: Optional[LoggingConfig] = None):
    """Build a middleware logging each request and its response status.

    Usage:
        app.use(request_logger())
    """
    config = config or LoggingConfig()

    def log_request(request: Request, response: Response, next: Next) -> None:
        path = request.path
        if path in config.skip_paths:
            next()
            return

        request_id = str(uuid.uuid4())[:8]
        request.context["request_id"] = request_id
        start_time = time.perf_counter()

        log_parts = [f"[{request_id}] --> {request.method} {path}"]

        if config.log_query:
            query = request.query
            if query:
                log_parts.append(f"query={query}")

        if config.log_headers:
            log_parts.append(f"headers={request.headers}")

        logger.info(" ".join(log_parts))

        def log_response(res: Response) -> None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(f"[{request_id}] <-- {res.status_code} ({duration_ms:.2f}ms)")

        response.on_finish(log_response)
        next()

    return log_request


def access_logger(format_string: Optional[str] = None):
    """Build a middleware writing Apache/Nginx style access log lines."""
    fmt = format_string or COMBINED_FORMAT

    def log_access(request: Request, response: Response, next: Next) -> None:
        # Captured now; mounted middleware may rewrite the URL later
        path = request.original_url

        def write_line(res: Response) -> None:
            log_data = {
                "remote_addr": request.ip or "-",
                "remote_user": "-",
                "time": time.strftime("%d/%b/%Y:%H:%M:%S %z"),
                "method": request.method,
                "path": path,
                "protocol": request.http_version,
                "status": res.status_code,
                "body_bytes": len(res.message.body),
                "referer": request.get("Referer") or "-",
                "user_agent": request.get("User-Agent") or "-",
            }
            logger.info(fmt.format(**log_data))

        response.on_finish(write_line)
        next()

    return log_access


__all__ = [
    "LoggingConfig",
    "request_logger",
    "access_logger",
]
