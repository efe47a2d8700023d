"""RoadServer - Minimal HTTP application server.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

RoadServer provides route registration and middleware composition over a
raw socket HTTP listener:
- Routes per HTTP verb with path parameters (/cat/:id)
- Global middleware, optionally mounted under a path prefix
- Route-local middleware
- Request/response helpers (headers, cookies, redirects)

Architecture Overview:
┌─────────────────────────────────────────────────────────────────────────────┐
│                              RoadServer                                      │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                              │
│  ┌───────────────────────────────────────────────────────────────────────┐  │
│  │                        Request Pipeline                                │  │
│  │  Client ──▶ Listener ──▶ Dispatcher ──▶ Middleware ──▶ Handler        │  │
│  └───────────────────────────────────────────────────────────────────────┘  │
│                                                                              │
│  ┌─────────────────┐  ┌─────────────────┐  ┌─────────────────────────────┐ │
│  │      HTTP       │  │   Middleware    │  │        Routing              │ │
│  │                 │  │                 │  │                             │ │
│  │ - Listener      │  │ - Mount prefix  │  │ - Pattern matching          │ │
│  │ - Request       │  │ - Logging       │  │ - Path parameters           │ │
│  │ - Response      │  │ - Cookies       │  │ - Dispatch chain            │ │
│  │ - Cookies       │  │                 │  │                             │ │
│  └─────────────────┘  └─────────────────┘  └─────────────────────────────┘ │
│                                                                              │
└─────────────────────────────────────────────────────────────────────────────┘

Request Flow:
1. Listener buffers the full request and wraps it in Request/Response
2. Dispatcher selects every route matching method and path
3. For each match: global middleware, route middleware, then the handler
4. No match: global middleware, then a 404 "Cannot <METHOD> <path>"
5. next(err) or a raised exception answers 500 "Error: <message>"

Usage:
    from roadserver_core import create_app

    app = create_app()

    app.get("/", lambda req, res: res.send("Home"))
    app.get("/cat/:id", lambda req, res: res.send(req.params))
    app.post("/cat", lambda req, res: res.send(req.body))

    app.listen(9000, lambda: print("Listening at http://localhost:9000"))
"""

__version__ = "0.1.0"
__author__ = "BlackRoad OS, Inc."

# Application
from roadserver_core.app.application import App, METHODS, create_app

# HTTP
from roadserver_core.http.request import Request
from roadserver_core.http.response import Response
from roadserver_core.http.server import HTTPServer
from roadserver_core.http.cookies import CookieError

# Routing
from roadserver_core.routing.matcher import MatchResult, PathMatcher, compile_pattern
from roadserver_core.routing.router import Route, RouteTable
from roadserver_core.routing.dispatcher import Dispatcher

# Middleware
from roadserver_core.middleware.base import MiddlewareEntry, MiddlewareStack
from roadserver_core.middleware.logging import access_logger, request_logger
from roadserver_core.middleware.cookies import cookie_parser

# Utils
from roadserver_core.utils.config import AppConfig, load_config
from roadserver_core.utils.logging import configure_logging

__all__ = [
    # Version
    "__version__",
    # Application
    "App",
    "METHODS",
    "create_app",
    # HTTP
    "Request",
    "Response",
    "HTTPServer",
    "CookieError",
    # Routing
    "MatchResult",
    "PathMatcher",
    "compile_pattern",
    "Route",
    "RouteTable",
    "Dispatcher",
    # Middleware
    "MiddlewareEntry",
    "MiddlewareStack",
    "access_logger",
    "request_logger",
    "cookie_parser",
    # Utils
    "AppConfig",
    "load_config",
    "configure_logging",
]
