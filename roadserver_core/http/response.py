"""Response - Write-side wrapper over an outbound HTTP message.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Union

from roadserver_core.http.cookies import (
    CookieError,
    encode_value,
    serialize_cookie,
    sign_value,
)
from roadserver_core.http.message import HeaderValue, OutgoingMessage
from roadserver_core.utils.helpers import encode_url, with_charset

if TYPE_CHECKING:
    from roadserver_core.http.request import Request

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Response:
    """HTTP Response object.

    Setters return the response so calls can be chained:

        response.status(201).set("X-Id", "42").send({"id": 42})
    """

    def __init__(self, message: OutgoingMessage, request: "Request"):
        self._message = message
        self.req = request

    @property
    def message(self) -> OutgoingMessage:
        return self._message

    @property
    def status_code(self) -> int:
        return self._message.status_code

    @status_code.setter
    def status_code(self, code: int) -> None:
        self._message.status_code = code

    @property
    def finished(self) -> bool:
        return self._message.finished

    headers_sent = finished

    def status(self, code: int) -> "Response":
        """Set the HTTP status code."""
        self._message.status_code = int(code)
        return self

    def send(self, body: Any = None) -> None:
        """Send the response.

        Strings are sent as-is, bytes as raw data, None as an empty body and
        anything else JSON-serialized.
        """
        if body is None:
            self.end()
        elif isinstance(body, str):
            if not self._message.has_header("Content-Type"):
                self.set("Content-Type", "text/html")
            self.end(body)
        elif isinstance(body, (bytes, bytearray)):
            if not self._message.has_header("Content-Type"):
                self.set("Content-Type", "application/octet-stream")
            self.end(bytes(body))
        else:
            self.json(body)

    def json(self, data: Any) -> None:
        """Send a JSON-serialized body."""
        if not self._message.has_header("Content-Type"):
            self.set("Content-Type", "application/json")
        self.end(json.dumps(data))

    def end(self, body: Union[str, bytes, None] = None) -> None:
        self._message.end(body)

    def on_finish(self, callback: Callable[["Response"], None]) -> None:
        """Run a callback once the response has been sent."""
        self._message.on_finish(lambda _message: callback(self))

    def set(
        self,
        field: Union[str, Dict[str, Any]],
        value: Any = None,
    ) -> "Response":
        """Set header ``field`` to ``value``, or pass a dict of header fields.

        A charset is appended to Content-Type values that lack one.

        Examples:
            response.set("Foo", ["bar", "baz"])
            response.set("Accept", "application/json")
            response.set({"Accept": "text/plain", "X-API-Key": "tobi"})
        """
        if isinstance(field, dict):
            for key, val in field.items():
                self.set(key, val)
            return self

        if not isinstance(field, str):
            raise TypeError(
                f"Header name must be a string, got {type(field).__name__}"
            )

        header_value: HeaderValue
        if isinstance(value, (list, tuple)):
            header_value = [str(item) for item in value]
        else:
            header_value = str(value)

        if field.lower() == "content-type":
            if isinstance(header_value, list):
                raise TypeError("Content-Type cannot be set to a list")
            header_value = with_charset(header_value)

        self._message.set_header(field, header_value)
        return self

    header = set

    def get(self, field: str) -> Optional[HeaderValue]:
        """Get a response header value (case-insensitive)."""
        return self._message.get_header(field)

    def append(self, field: str, value: Any) -> "Response":
        """Append additional header ``field`` with value ``value``.

        Examples:
            response.append("Link", ["<http://localhost/>", "<http://localhost:3000/>"])
            response.append("Set-Cookie", "foo=bar; Path=/; HttpOnly")
        """
        prev = self.get(field)
        if prev:
            prev_list = prev if isinstance(prev, list) else [prev]
            value = prev_list + (list(value) if isinstance(value, (list, tuple)) else [value])
        return self.set(field, value)

    def cookie(self, name: str, value: Any, **options: Any) -> "Response":
        """Set cookie ``name`` to ``value``.

        Options:
            max_age: max-age in milliseconds, converted to Expires and Max-Age
            expires: expiry datetime
            path: defaults to "/"
            domain, secure, http_only, same_site
            signed: sign the cookie (requires the request secret)

        Examples:
            response.cookie("rememberme", "1", max_age=900000, http_only=True)
        """
        signed = options.pop("signed", False)
        secret = self.req.secret

        if signed and not secret:
            raise CookieError("cookie_parser(secret) required for signed cookies")

        val = encode_value(value)
        if signed:
            val = sign_value(val, secret)

        max_age = options.pop("max_age", None)
        if max_age is not None:
            max_age = float(max_age)
            options["expires"] = datetime.now(timezone.utc) + timedelta(milliseconds=max_age)
            options["max_age"] = int(max_age // 1000)

        options.setdefault("path", "/")

        return self.append("Set-Cookie", serialize_cookie(name, val, **options))

    def clear_cookie(self, name: str, **options: Any) -> "Response":
        """Clear cookie ``name``."""
        opts = {"expires": EPOCH + timedelta(milliseconds=1), "path": "/"}
        opts.update(options)
        # An expired cookie must not be revived by max_age
        opts.pop("max_age", None)
        return self.cookie(name, "", **opts)

    def location(self, url: str) -> "Response":
        """Set the Location header to ``url``.

        The given ``url`` can also be "back", which redirects to the
        Referrer or Referer header, or "/".
        """
        loc = url
        if url == "back":
            loc = self.req.get("Referrer") or "/"
        return self.set("Location", encode_url(loc))

    def redirect(self, *args: Any) -> None:
        """Redirect to a URL with an optional status, defaulting to 302.

        Examples:
            response.redirect("/foo/bar")
            response.redirect(301, "http://example.com")
        """
        status = 302
        if len(args) == 1:
            address = args[0]
        elif len(args) == 2:
            if isinstance(args[0], int):
                status, address = args
            else:
                logger.warning(
                    "response.redirect(url, status) is deprecated, "
                    "use response.redirect(status, url)"
                )
                address, status = args
        else:
            raise TypeError(f"redirect() takes 1 or 2 arguments, got {len(args)}")

        self.location(address)
        address = self.get("Location")

        body = f"{_phrase(status)}. Redirecting to {address}"

        self.status(status)
        self.set("Content-Type", "text/plain")
        self.set("Content-Length", len(body.encode("utf-8")))

        if self.req.method == "HEAD":
            self.end()
        else:
            self.end(body)

    def __repr__(self) -> str:
        return f"<Response {self.status_code}>"


def _phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return str(status)


__all__ = [
    "Response",
]
