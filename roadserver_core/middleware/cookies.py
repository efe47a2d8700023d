"""Cookie Middleware - Installs the cookie signing secret on requests.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Callable

from roadserver_core.http.request import Request
from roadserver_core.http.response import Response

logger = logging.getLogger(__name__)


def cookie_parser(secret: str = ""):
    """Build a middleware enabling signed cookies.

    With a secret, ``request.signed_cookies`` verifies incoming cookies and
    ``response.cookie(..., signed=True)`` signs outgoing ones.

    Usage:
        app.use(cookie_parser("keyboard cat"))
    """
    if not isinstance(secret, str):
        raise TypeError(f"Cookie secret must be a string, got {type(secret).__name__}")

    def parse_cookies(request: Request, response: Response, next: Callable[..., None]) -> None:
        if secret:
            request.secret = secret
        next()

    return parse_cookies


__all__ = [
    "cookie_parser",
]
