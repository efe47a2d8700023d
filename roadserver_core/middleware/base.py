"""Middleware Base - Mounted middleware entries and the global stack.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Union

from roadserver_core.utils.helpers import strip_prefix

logger = logging.getLogger(__name__)

# (request, response, next) -> None
MiddlewareHandler = Callable[..., Any]

ROOT_PREFIX = "/"


@dataclass(frozen=True)
class MiddlewareEntry:
    """Middleware mounted under a path prefix.

    Pipeline:
    ┌────────────────────────────────────────────────────────────┐
    │                  Middleware Pipeline                        │
    │                                                             │
    │  Request ──▶ MW1 ──next()──▶ MW2 ──next()──▶ ... ──▶ Handler│
    │                                                             │
    │  Entries whose prefix does not start the path are skipped.  │
    └────────────────────────────────────────────────────────────┘
    """

    prefix: str
    handler: MiddlewareHandler

    def applies_to(self, path: str) -> bool:
        """Check if the entry is mounted over the given path."""
        return path.startswith(self.prefix)

    def mount_url(self, url: str) -> str:
        """Rewrite a request target relative to this mount point."""
        return strip_prefix(url, self.prefix)

    @property
    def base_url(self) -> str:
        """Mount prefix as seen by the handler (no trailing slash)."""
        if self.prefix == ROOT_PREFIX:
            return ""
        return self.prefix.rstrip("/")


def make_entry(prefix: str, handler: Any) -> MiddlewareEntry:
    """Validate and build a middleware entry."""
    if not isinstance(prefix, str):
        raise TypeError(f"Mount prefix must be a string, got {type(prefix).__name__}")
    if not callable(handler):
        raise TypeError(
            f"Middleware must be callable, got {type(handler).__name__}"
        )
    return MiddlewareEntry(prefix=prefix or ROOT_PREFIX, handler=handler)


class MiddlewareStack:
    """Ordered list of globally mounted middleware.

    Execution order equals registration order.

    Usage:
        stack = MiddlewareStack()
        stack.mount(log_requests)
        stack.mount("/admin", require_login)
    """

    def __init__(self, entries: Optional[List[MiddlewareEntry]] = None):
        self._entries: List[MiddlewareEntry] = list(entries or [])
        self._lock = threading.RLock()

    def mount(
        self,
        prefix_or_handler: Union[str, MiddlewareHandler],
        handler: Optional[MiddlewareHandler] = None,
    ) -> MiddlewareEntry:
        """Mount middleware.

        Args:
            prefix_or_handler: Mount prefix, or the handler itself to mount at "/"
            handler: Handler when a prefix is given

        Returns:
            The created entry
        """
        if handler is None:
            entry = make_entry(ROOT_PREFIX, prefix_or_handler)
        else:
            entry = make_entry(prefix_or_handler, handler)

        with self._lock:
            self._entries.append(entry)

        logger.debug(f"Mounted middleware {_name(entry.handler)} at {entry.prefix}")
        return entry

    def entries(self) -> List[MiddlewareEntry]:
        """Get a snapshot of the mounted entries."""
        with self._lock:
            return self._entries.copy()

    def __iter__(self) -> Iterator[MiddlewareEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)


def _name(handler: Any) -> str:
    return getattr(handler, "__name__", type(handler).__name__)


__all__ = [
    "MiddlewareEntry",
    "MiddlewareHandler",
    "MiddlewareStack",
    "ROOT_PREFIX",
    "make_entry",
]
