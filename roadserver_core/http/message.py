"""HTTP Messages - Raw inbound and outbound messages on the wire.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Callable, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

HeaderValue = Union[str, List[str]]


@dataclass
class IncomingMessage:
    """Inbound HTTP message.

    Header names are stored lower-cased. The body is the complete, buffered
    request body.
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    http_version: str = "HTTP/1.1"
    remote_addr: str = ""
    encrypted: bool = False
    timestamp: float = field(default_factory=time.time)

    @property
    def content_length(self) -> int:
        """Get Content-Length header (0 when absent).

        Raises:
            RequestParseError: If the value is not a non-negative integer
        """
        value = self.headers.get("content-length", "").strip()
        if not value:
            return 0
        # int() would also take signs, underscores and non-ASCII digits
        if not (value.isascii() and value.isdigit()):
            raise RequestParseError(f"Invalid Content-Length: {value!r}")
        return int(value)

    @property
    def is_chunked(self) -> bool:
        """Check if the body uses chunked transfer encoding."""
        return "chunked" in self.headers.get("transfer-encoding", "").lower()

    @classmethod
    def parse_head(cls, head: bytes) -> "IncomingMessage":
        """Parse the request line and headers of a raw HTTP request."""
        lines = head.split(b"\r\n")

        # Parse request line
        request_line = lines[0].decode("latin-1")
        if not request_line:
            raise RequestParseError("Empty request")
        parts = request_line.split(" ")
        if len(parts) != 3 or not parts[0] or not parts[1]:
            raise RequestParseError(f"Malformed request line: {request_line!r}")
        method, url, http_version = parts
        if not http_version.startswith("HTTP/"):
            raise RequestParseError(f"Unsupported protocol: {http_version!r}")

        # Parse headers
        headers: Dict[str, str] = {}
        for line in lines[1:]:
            if not line:
                continue
            if b":" not in line:
                raise RequestParseError(f"Malformed header line: {line!r}")
            key, value = line.decode("latin-1").split(":", 1)
            key = key.strip().lower()
            value = value.strip()
            if key in headers:
                separator = "; " if key == "cookie" else ", "
                headers[key] = f"{headers[key]}{separator}{value}"
            else:
                headers[key] = value

        return cls(
            method=method.upper(),
            url=url,
            headers=headers,
            http_version=http_version,
        )

    @classmethod
    def from_raw(cls, data: bytes) -> "IncomingMessage":
        """Parse a complete raw HTTP request (head and body)."""
        head, _, body = data.partition(b"\r\n\r\n")
        message = cls.parse_head(head)
        message.body = body
        return message


class OutgoingMessage:
    """Outbound HTTP message.

    Headers keep the casing of their first assignment and are looked up
    case-insensitively. The message is finished by the first `end()`;
    later calls are ignored.
    """

    def __init__(self, method: str = "GET"):
        self.method = method.upper()
        self.status_code = 200
        self.body = b""
        self._headers: Dict[str, Tuple[str, HeaderValue]] = {}
        self._finished = False
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._finish_callbacks: List[Callable[["OutgoingMessage"], None]] = []

    @property
    def status_message(self) -> str:
        """Get status message."""
        try:
            return HTTPStatus(self.status_code).phrase
        except ValueError:
            return "Unknown"

    @property
    def finished(self) -> bool:
        return self._finished

    def set_header(self, name: str, value: HeaderValue) -> "OutgoingMessage":
        """Set header value, replacing any previous value."""
        self._headers[name.lower()] = (name, value)
        return self

    def get_header(self, name: str) -> Optional[HeaderValue]:
        """Get header value (case-insensitive)."""
        entry = self._headers.get(name.lower())
        return entry[1] if entry else None

    def has_header(self, name: str) -> bool:
        return name.lower() in self._headers

    def header_lines(self) -> List[Tuple[str, str]]:
        """Flatten headers into (name, value) pairs, one per list item."""
        lines = []
        for name, value in self._headers.values():
            if isinstance(value, list):
                lines.extend((name, item) for item in value)
            else:
                lines.append((name, value))
        return lines

    def on_finish(self, callback: Callable[["OutgoingMessage"], None]) -> None:
        """Register a callback run once the message is finished."""
        with self._lock:
            if not self._finished:
                self._finish_callbacks.append(callback)
                return
        callback(self)

    def end(self, body: Union[str, bytes, None] = None) -> bool:
        """Finish the message.

        Returns:
            False if the message was already finished
        """
        with self._lock:
            if self._finished:
                logger.warning(
                    f"Ignoring write after end ({self.status_code} {self.method})"
                )
                return False
            if isinstance(body, str):
                body = body.encode("utf-8")
            self.body = body or b""
            self._finished = True
            callbacks, self._finish_callbacks = self._finish_callbacks, []

        for callback in callbacks:
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Finish callback error: {e}", exc_info=e)

        self._done.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the message is finished."""
        return self._done.wait(timeout)

    def to_bytes(self) -> bytes:
        """Convert to raw HTTP response."""
        lines = [f"HTTP/1.1 {self.status_code} {self.status_message}"]

        # Add Content-Length if not set
        if not self.has_header("Content-Length"):
            self.set_header("Content-Length", str(len(self.body)))

        for key, value in self.header_lines():
            lines.append(f"{key}: {value}")

        lines.append("")
        header_bytes = "\r\n".join(lines).encode("latin-1")

        # HEAD responses carry headers only
        if self.method == "HEAD":
            return header_bytes + b"\r\n"
        return header_bytes + b"\r\n" + self.body


class RequestParseError(Exception):
    """Raised when a raw request cannot be parsed."""

    pass


__all__ = [
    "HeaderValue",
    "IncomingMessage",
    "OutgoingMessage",
    "RequestParseError",
]
