"""Router - Route table and method/path matching.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from roadserver_core.middleware.base import MiddlewareEntry, ROOT_PREFIX, make_entry
from roadserver_core.routing.matcher import PathMatcher, compile_pattern

logger = logging.getLogger(__name__)

# (request, response) -> None
RouteHandler = Callable[..., Any]


@dataclass
class Route:
    """Route definition.

    Per-request parameters are returned by `match`, never stored here.
    """

    method: str
    pattern: str
    handler: RouteHandler
    middleware: List[MiddlewareEntry] = field(default_factory=list)

    # Compiled pattern
    _matcher: Optional[PathMatcher] = field(default=None, repr=False)

    def __post_init__(self):
        """Normalize the method and compile the pattern."""
        self.method = self.method.upper()
        self._matcher = compile_pattern(self.pattern)

    def accepts(self, method: str) -> bool:
        """Check the request method; HEAD is served by GET routes."""
        method = method.upper()
        return self.method == method or (self.method == "GET" and method == "HEAD")

    def match(self, method: str, path: str) -> Optional[Dict[str, str]]:
        """Check if route matches method and path.

        Returns:
            Dict of path parameters if match, None otherwise
        """
        if not self.accepts(method):
            return None

        result = self._matcher(path)
        if result.matched:
            return result.params
        return None


def normalize_middleware(middleware: Any) -> List[MiddlewareEntry]:
    """Turn a single handler or a sequence of handlers into route-local entries."""
    if callable(middleware):
        middleware = [middleware]
    elif not isinstance(middleware, (list, tuple)):
        raise TypeError(
            f"Route middleware must be callable or a sequence, "
            f"got {type(middleware).__name__}"
        )
    return [make_entry(ROOT_PREFIX, handler) for handler in middleware]


class RouteTable:
    """Ordered table of registered routes.

    Features:
    - Path parameters (/users/:id)
    - Route-local middleware
    - Every matching route is returned, in registration order

    Usage:
        table = RouteTable()
        table.add("GET", "/users/:id", get_user)
        table.add("POST", "/users", [authenticate, validate], create_user)

        for route, params in table.match("GET", "/users/123"):
            ...
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._lock = threading.RLock()

    def add(self, method: str, pattern: str, *handlers: Any) -> Route:
        """Add a route.

        Args:
            method: HTTP method
            pattern: URL pattern
            handlers: (handler) or (middleware, handler); middleware may be
                a single callable or a sequence of callables

        Returns:
            The created route
        """
        if not isinstance(pattern, str):
            raise TypeError(f"Route pattern must be a string, got {type(pattern).__name__}")

        if len(handlers) == 1:
            middleware: Sequence[Any] = []
            handler = handlers[0]
        elif len(handlers) == 2:
            middleware, handler = handlers
        else:
            raise TypeError(
                f"Expected (pattern, handler) or (pattern, middleware, handler), "
                f"got {len(handlers)} handler arguments"
            )

        if not callable(handler):
            raise TypeError(f"Route handler must be callable, got {type(handler).__name__}")

        route = Route(
            method=method,
            pattern=pattern,
            handler=handler,
            middleware=normalize_middleware(middleware),
        )

        with self._lock:
            self._routes.append(route)

        logger.debug(f"Registered route {route.method} {route.pattern}")
        return route

    def match(self, method: str, path: str) -> List[Tuple[Route, Dict[str, str]]]:
        """Match a request against every route.

        Args:
            method: HTTP method
            path: Request path

        Returns:
            List of (route, params) for all matching routes
        """
        matches = []
        for route in self.get_routes():
            params = route.match(method, path)
            if params is not None:
                matches.append((route, params))
        return matches

    def get_routes(self) -> List[Route]:
        """Get all routes."""
        with self._lock:
            return self._routes.copy()

    def __len__(self) -> int:
        return len(self._routes)


__all__ = [
    "Route",
    "RouteHandler",
    "RouteTable",
    "normalize_middleware",
]
