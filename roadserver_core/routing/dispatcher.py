"""Dispatcher - Route selection and middleware chain execution.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Dispatch Flow:
┌─────────────────────────────────────────────────────────────────────────┐
│  Request ──▶ RouteTable.match ──▶ for each matching route:              │
│                                     global MW ─▶ local MW ─▶ handler    │
│                                                                         │
│            no matching route ──▶    global MW ─▶ 404 "Cannot GET /x"    │
│                                                                         │
│  next(err) or a raised exception ──▶ 500 "Error: <message>"             │
└─────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, List

from roadserver_core.middleware.base import MiddlewareEntry, MiddlewareStack
from roadserver_core.routing.router import Route, RouteTable

if TYPE_CHECKING:
    from roadserver_core.http.request import Request
    from roadserver_core.http.response import Response

logger = logging.getLogger(__name__)

Continuation = Callable[[], None]
ErrorHandler = Callable[[Any], None]


def build_chain(
    request: "Request",
    response: "Response",
    entries: List[MiddlewareEntry],
    terminal: Continuation,
    on_error: ErrorHandler,
) -> Continuation:
    """Build the continuation chain for one dispatch run.

    The chain is built right to left, starting from the terminal, so the
    first entry is the first to execute. Entries whose prefix does not start
    the request path are left out of the chain.

    Args:
        request: Request being dispatched
        response: Response for the request
        entries: Middleware in execution order
        terminal: Last link (route handler or 404 fallback)
        on_error: Called with the value passed to next(err)

    Returns:
        Head of the chain
    """
    path = request.path
    url = request.url

    continuation = terminal
    for entry in reversed(entries):
        if entry.applies_to(path):
            continuation = _link(entry, continuation, request, response, url, on_error)
    return continuation


def _link(
    entry: MiddlewareEntry,
    downstream: Continuation,
    request: "Request",
    response: "Response",
    url: str,
    on_error: ErrorHandler,
) -> Continuation:
    """Wrap one middleware entry around the already built continuation."""

    def invoke() -> None:
        parent_base_url = request.base_url

        def next_(err: Any = None) -> None:
            # Leaving the mount point
            request.url = url
            request.base_url = parent_base_url
            if err is not None:
                on_error(err)
                return
            downstream()

        request.url = entry.mount_url(url)
        request.base_url = parent_base_url + entry.base_url
        entry.handler(request, response, next_)

    return invoke


class Dispatcher:
    """Request dispatch engine.

    Every route matching the request is dispatched as an independent run of
    global middleware, route-local middleware and the route handler.

    Usage:
        dispatcher = Dispatcher(routes, middleware)
        dispatcher.dispatch(request, response)
    """

    def __init__(self, routes: RouteTable, middleware: MiddlewareStack):
        self.routes = routes
        self.middleware = middleware

    def dispatch(self, request: "Request", response: "Response") -> int:
        """Dispatch a request.

        Returns:
            Number of routes dispatched (0 when the 404 fallback ran)
        """
        global_entries = self.middleware.entries()
        matches = self.routes.match(request.method, request.path)

        if not matches:
            # Global middleware still runs when no route matches
            self._run(
                request,
                response,
                global_entries,
                lambda: self.not_found(request, response),
            )
            return 0

        original_url = request.url
        original_base_url = request.base_url
        for route, params in matches:
            request.url = original_url
            request.base_url = original_base_url
            request.params = params
            self._run(
                request,
                response,
                global_entries + route.middleware,
                _route_terminal(route, request, response),
            )
        return len(matches)

    def _run(
        self,
        request: "Request",
        response: "Response",
        entries: List[MiddlewareEntry],
        terminal: Continuation,
    ) -> None:
        url = request.url
        base_url = request.base_url

        def on_error(err: Any) -> None:
            self.handle_error(request, response, err)

        chain = build_chain(request, response, entries, terminal, on_error)
        try:
            chain()
        except Exception as exc:
            request.url = url
            request.base_url = base_url
            on_error(exc)

    def not_found(self, request: "Request", response: "Response") -> None:
        """Terminal link used when no route matches."""
        logger.debug(f"No route for {request.method} {request.path}")
        response.status(404).send(f"Cannot {request.method} {request.path}")

    def handle_error(self, request: "Request", response: "Response", err: Any) -> None:
        """Answer 500 for an error passed to next() or raised by a link."""
        message = str(err)
        if isinstance(err, BaseException):
            logger.error(
                f"Error handling {request.method} {request.path}: {message}",
                exc_info=err,
            )
        else:
            logger.error(f"Error handling {request.method} {request.path}: {message}")

        if response.finished:
            logger.warning(
                f"Response for {request.method} {request.path} already sent, "
                f"error not reported to client"
            )
            return

        response.status(500).send(f"Error: {message}")


def _route_terminal(route: Route, request: "Request", response: "Response") -> Continuation:
    def terminal() -> None:
        route.handler(request, response)

    return terminal


__all__ = [
    "Dispatcher",
    "build_chain",
    "Continuation",
]
