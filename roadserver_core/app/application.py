"""Application - Route registration, middleware mounting and serving.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from roadserver_core.http.message import IncomingMessage, OutgoingMessage
from roadserver_core.http.request import Request
from roadserver_core.http.response import Response
from roadserver_core.http.server import HTTPServer
from roadserver_core.middleware.base import MiddlewareStack
from roadserver_core.middleware.logging import access_logger
from roadserver_core.routing.dispatcher import Dispatcher
from roadserver_core.routing.router import Route, RouteTable
from roadserver_core.utils.config import AppConfig
from roadserver_core.utils.logging import ROOT_LOGGER, configure_logging

logger = logging.getLogger(__name__)

# HTTP verbs that get a registrar method, e.g. App.get / App.m_search
METHODS = (
    "ACL", "BIND", "CHECKOUT", "CONNECT", "COPY", "DELETE", "GET", "HEAD",
    "LINK", "LOCK", "M-SEARCH", "MERGE", "MKACTIVITY", "MKCALENDAR", "MKCOL",
    "MOVE", "NOTIFY", "OPTIONS", "PATCH", "POST", "PROPFIND", "PROPPATCH",
    "PURGE", "PUT", "QUERY", "REBIND", "REPORT", "SEARCH", "SOURCE",
    "SUBSCRIBE", "TRACE", "UNBIND", "UNLINK", "UNLOCK", "UNSUBSCRIBE",
)


def registrar_name(method: str) -> str:
    """Attribute name of the registrar for an HTTP verb."""
    return method.lower().replace("-", "_")


def _make_registrar(method: str) -> Callable[..., Any]:
    def register(self: "App", pattern: str, *handlers: Any) -> Any:
        if not handlers:
            # Decorator form: @app.get("/path")
            def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
                self.add_route(method, pattern, handler)
                return handler

            return decorator

        self.add_route(method, pattern, *handlers)
        return self

    register.__name__ = registrar_name(method)
    register.__qualname__ = f"App.{register.__name__}"
    register.__doc__ = (
        f"Register a {method} route: (pattern, handler) or "
        f"(pattern, middleware, handler). With only a pattern, returns a decorator."
    )
    return register


def with_verb_registrars(cls: type) -> type:
    """Install one registrar per entry of METHODS on the class."""
    for method in METHODS:
        setattr(cls, registrar_name(method), _make_registrar(method))
    return cls


@with_verb_registrars
class App:
    """HTTP application.

    Features:
    - Route registration per HTTP verb with path parameters
    - Global middleware, optionally mounted under a path prefix
    - Route-local middleware
    - Threaded socket listener

    Usage:
        app = App()

        app.use(request_logger())
        app.use("/admin", require_login)

        app.get("/cat/:id", lambda req, res: res.send(req.params))
        app.post("/cat", parse_auth, lambda req, res: res.send(req.body))

        app.listen(9000, lambda: print("Listening at http://localhost:9000"))
    """

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()
        self.routes = RouteTable()
        self.middleware = MiddlewareStack()
        self.dispatcher = Dispatcher(self.routes, self.middleware)
        self._server: Optional[HTTPServer] = None

        if self.config.access_log:
            self.use(access_logger())

    def use(self, *args: Any) -> "App":
        """Mount global middleware.

        Args:
            args: (handler) to mount at "/", or (prefix, handler)
        """
        if len(args) == 1:
            self.middleware.mount(args[0])
        elif len(args) == 2:
            self.middleware.mount(args[0], args[1])
        else:
            raise TypeError(f"use() takes 1 or 2 arguments, got {len(args)}")
        return self

    def add_route(self, method: str, pattern: str, *handlers: Any) -> Route:
        """Register a route for an HTTP method.

        Args:
            method: HTTP method (any case)
            pattern: URL pattern
            handlers: (handler) or (middleware, handler)
        """
        return self.routes.add(method, pattern, *handlers)

    def handle(self, incoming: IncomingMessage, outgoing: OutgoingMessage) -> None:
        """Handle one buffered inbound message."""
        request = Request(incoming, secret=self.config.cookie_secret)
        response = Response(outgoing, request)
        self.dispatcher.dispatch(request, response)

    def listen(
        self,
        port: Optional[int] = None,
        on_ready: Optional[Callable[[], None]] = None,
        host: Optional[str] = None,
        block: bool = True,
    ) -> HTTPServer:
        """Start serving.

        Args:
            port: Override config port (0 picks a free port)
            on_ready: Called once the socket is listening
            host: Override config host
            block: Serve on the calling thread; otherwise from a daemon thread

        Returns:
            The server (once stopped, when blocking)
        """
        if not logging.getLogger(ROOT_LOGGER).handlers:
            configure_logging(self.config.log_level, self.config.log_format)

        server = HTTPServer(self.handle, self.config)
        server.bind(host, port)
        self._server = server

        logger.info(
            f"Serving {len(self.routes)} routes, {len(self.middleware)} middleware"
        )
        if on_ready is not None:
            on_ready()

        if block:
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                logger.info("Interrupted, shutting down")
            finally:
                server.stop()
        else:
            server.start()
        return server

    def close(self) -> None:
        """Stop the running server."""
        if self._server:
            self._server.stop()
            self._server = None

    def get_stats(self) -> Dict[str, Any]:
        """Get application statistics."""
        return {
            "routes": len(self.routes),
            "middleware": len(self.middleware),
            "running": bool(self._server and self._server.running),
        }


def create_app(config: Optional[AppConfig] = None) -> App:
    """Create a new application."""
    return App(config)


__all__ = [
    "App",
    "METHODS",
    "create_app",
    "registrar_name",
]
