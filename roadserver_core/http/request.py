"""Request - Read view over an inbound HTTP message.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlsplit

from roadserver_core.http.cookies import decode_value, parse_cookies, unsign_value
from roadserver_core.http.message import IncomingMessage
from roadserver_core.utils.helpers import parse_content_type

logger = logging.getLogger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"
JSON = "application/json"


def parse_body(content_type: Optional[str], raw_body: str) -> Any:
    """Parse a raw body according to its Content-Type.

    - application/x-www-form-urlencoded: flat dict of decoded fields
    - application/json: parsed value, {} when the body is not valid JSON
    - anything else: {}
    """
    if not content_type or not raw_body:
        return {}

    media_type, _ = parse_content_type(content_type)

    if media_type == FORM_URLENCODED:
        return dict(parse_qsl(raw_body, keep_blank_values=True))

    if media_type == JSON:
        try:
            return json.loads(raw_body)
        except (ValueError, RecursionError):
            logger.debug("Ignoring malformed JSON body")
            return {}

    return {}


class Request:
    """HTTP Request object.

    Wraps one inbound message. ``url`` is writable: the dispatcher rewrites
    it while a mounted middleware runs, and ``path`` and ``query`` are
    derived from it on every access. ``body`` is parsed on every access.
    """

    def __init__(self, message: IncomingMessage, secret: str = ""):
        self._message = message
        self.url = message.url
        self.base_url = ""
        self.params: Dict[str, str] = {}
        self.secret = secret
        # Free-form storage for middleware
        self.context: Dict[str, Any] = {}

    @property
    def message(self) -> IncomingMessage:
        return self._message

    @property
    def headers(self) -> Dict[str, str]:
        """Request headers, keyed by lower-cased name."""
        return self._message.headers

    def get(self, name: str) -> Optional[str]:
        """Get header value (case-insensitive).

        The Referrer and Referer fields are interchangeable.
        """
        if not isinstance(name, str):
            raise TypeError("name must be a string to Request.get")
        if not name:
            raise TypeError("name argument is required to Request.get")

        lc = name.lower()
        if lc in ("referer", "referrer"):
            return self.headers.get("referrer") or self.headers.get("referer")
        return self.headers.get(lc)

    header = get

    @property
    def protocol(self) -> str:
        """Request protocol: "https" for encrypted connections, else "http"."""
        return "https" if self._message.encrypted else "http"

    @property
    def secure(self) -> bool:
        return self.protocol == "https"

    @property
    def hostname(self) -> Optional[str]:
        """Hostname from the Host header."""
        return self.headers.get("host")

    @property
    def original_url(self) -> str:
        """Request target as received, unaffected by mount rewriting."""
        return self._message.url

    @property
    def path(self) -> str:
        """Path part of the (possibly rewritten) request URL."""
        return urlsplit(self.url).path or "/"

    @property
    def query(self) -> Dict[str, str]:
        """Query string parameters; the last occurrence of a key wins."""
        return dict(parse_qsl(urlsplit(self.url).query, keep_blank_values=True))

    @property
    def method(self) -> str:
        return self._message.method

    @property
    def http_version(self) -> str:
        return self._message.http_version

    @property
    def ip(self) -> str:
        return self._message.remote_addr

    @property
    def raw_body(self) -> str:
        """Request body decoded as UTF-8 ("" when empty)."""
        return self._message.body.decode("utf-8", errors="replace")

    @property
    def body(self) -> Any:
        """Body parsed according to Content-Type (re-parsed on each access)."""
        return parse_body(self.get("Content-Type"), self.raw_body)

    @property
    def cookies(self) -> Dict[str, Any]:
        """Unsigned cookies from the Cookie header."""
        cookies = parse_cookies(self.headers.get("cookie", ""))
        return {
            name: decode_value(value)
            for name, value in cookies.items()
            if not (self.secret and unsign_value(value, self.secret) is not None)
        }

    @property
    def signed_cookies(self) -> Dict[str, Any]:
        """Cookies whose signature verifies against ``secret``."""
        if not self.secret:
            return {}
        signed = {}
        for name, value in parse_cookies(self.headers.get("cookie", "")).items():
            unsigned = unsign_value(value, self.secret)
            if unsigned is not None:
                signed[name] = decode_value(unsigned)
        return signed

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.url}>"


__all__ = [
    "Request",
    "parse_body",
]
