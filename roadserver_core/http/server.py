"""HTTP Server - Socket listener feeding complete requests to a handler.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Each accepted connection is served on its own thread: the request head and
the whole body are buffered, the handler is invoked, and the connection
thread waits for the response to be finished before writing it and closing
the connection.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Callable, Optional, Tuple

from roadserver_core.http.message import (
    IncomingMessage,
    OutgoingMessage,
    RequestParseError,
)
from roadserver_core.utils.config import AppConfig

logger = logging.getLogger(__name__)

RequestHandler = Callable[[IncomingMessage, OutgoingMessage], None]

RECV_SIZE = 65536
MAX_HEAD_SIZE = 64 * 1024
ACCEPT_POLL_INTERVAL = 0.5


class HTTPServer:
    """Threaded HTTP/1.1 listener.

    Usage:
        server = HTTPServer(app.handle, AppConfig(port=3000))
        server.bind()
        server.serve_forever()
    """

    def __init__(self, handler: RequestHandler, config: Optional[AppConfig] = None):
        self.handler = handler
        self.config = config or AppConfig()
        self._socket: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._running = threading.Event()

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the port is resolved when binding to port 0."""
        if self._socket is None:
            return self.config.host, self.config.port
        host, port = self._socket.getsockname()[:2]
        return host, port

    @property
    def running(self) -> bool:
        return self._running.is_set()

    def bind(self, host: Optional[str] = None, port: Optional[int] = None) -> Tuple[str, int]:
        """Create the listening socket."""
        host = host if host is not None else self.config.host
        port = port if port is not None else self.config.port

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
            sock.listen(self.config.backlog)
        except OSError:
            sock.close()
            raise
        sock.settimeout(ACCEPT_POLL_INTERVAL)

        self._socket = sock
        self._running.set()
        logger.info(f"Listening on {host}:{self.address[1]}")
        return self.address

    def serve_forever(self) -> None:
        """Accept connections until `stop()` is called."""
        if self._socket is None:
            self.bind()

        try:
            while self._running.is_set():
                try:
                    conn, addr = self._socket.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if self._running.is_set():
                        logger.error(f"Accept failed: {e}")
                    break

                thread = threading.Thread(
                    target=self._handle_connection,
                    args=(conn, addr),
                    daemon=True,
                )
                thread.start()
        finally:
            self._close_socket()

    def start(self) -> threading.Thread:
        """Serve from a background daemon thread."""
        if self._socket is None:
            self.bind()
        self._thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """Stop accepting connections."""
        self._running.clear()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=ACCEPT_POLL_INTERVAL * 4)
        self._close_socket()
        logger.info("Server stopped")

    def _close_socket(self) -> None:
        if self._socket is not None:
            try:
                self._socket.close()
            except OSError as e:
                logger.debug(f"Error closing listener: {e}")
            self._socket = None

    def _handle_connection(self, conn: socket.socket, addr: Tuple[str, int]) -> None:
        """Serve a single request on an accepted connection."""
        with conn:
            conn.settimeout(self.config.timeout)
            try:
                incoming = self._read_request(conn)
            except RequestParseError as e:
                logger.warning(f"Bad request from {addr[0]}: {e}")
                self._send_error(conn, 400)
                return
            except PayloadTooLargeError as e:
                logger.warning(f"Request from {addr[0]} rejected: {e}")
                self._send_error(conn, 413)
                return
            except (socket.timeout, ConnectionError) as e:
                logger.debug(f"Connection from {addr[0]} dropped: {e}")
                return

            if incoming is None:
                return
            incoming.remote_addr = addr[0]

            outgoing = OutgoingMessage(incoming.method)
            try:
                self.handler(incoming, outgoing)
            except Exception as e:
                logger.error(
                    f"Unhandled error for {incoming.method} {incoming.url}: {e}",
                    exc_info=e,
                )
                if not outgoing.finished:
                    outgoing.status_code = 500
                    outgoing.end("Internal Server Error")

            # No timeout: a handler that never responds holds the connection
            outgoing.wait()
            outgoing.set_header("Connection", "close")
            try:
                conn.sendall(outgoing.to_bytes())
            except OSError as e:
                logger.debug(f"Failed writing response to {addr[0]}: {e}")

    def _read_request(self, conn: socket.socket) -> Optional[IncomingMessage]:
        """Read one request, buffering the complete body."""
        buffer = b""
        while b"\r\n\r\n" not in buffer:
            chunk = conn.recv(RECV_SIZE)
            if not chunk:
                if buffer:
                    raise RequestParseError("Connection closed mid-request")
                return None
            buffer += chunk
            if len(buffer) > MAX_HEAD_SIZE and b"\r\n\r\n" not in buffer:
                raise RequestParseError("Request head too large")

        head, _, rest = buffer.partition(b"\r\n\r\n")
        incoming = IncomingMessage.parse_head(head)

        if incoming.headers.get("expect", "").lower() == "100-continue":
            conn.sendall(b"HTTP/1.1 100 Continue\r\n\r\n")

        if incoming.is_chunked:
            incoming.body = self._read_chunked(conn, rest)
        else:
            length = incoming.content_length
            self._check_size(length)
            while len(rest) < length:
                chunk = conn.recv(RECV_SIZE)
                if not chunk:
                    raise RequestParseError("Connection closed mid-body")
                rest += chunk
            incoming.body = rest[:length]

        return incoming

    def _read_chunked(self, conn: socket.socket, buffer: bytes) -> bytes:
        """Decode a chunked transfer-encoded body."""
        body = b""

        def fill(predicate: Callable[[bytes], bool]) -> None:
            nonlocal buffer
            while not predicate(buffer):
                chunk = conn.recv(RECV_SIZE)
                if not chunk:
                    raise RequestParseError("Connection closed mid-body")
                buffer += chunk

        while True:
            fill(lambda b: b"\r\n" in b)
            size_line, _, buffer = buffer.partition(b"\r\n")
            try:
                size = int(size_line.split(b";")[0].strip(), 16)
            except ValueError:
                raise RequestParseError(f"Invalid chunk size: {size_line!r}")

            if size == 0:
                # Skip trailers up to the final empty line
                fill(lambda b: b.startswith(b"\r\n") or b"\r\n\r\n" in b)
                return body

            self._check_size(len(body) + size)
            fill(lambda b: len(b) >= size + 2)
            body += buffer[:size]
            buffer = buffer[size + 2:]

    def _check_size(self, size: int) -> None:
        limit = self.config.max_request_size
        if limit and size > limit:
            raise PayloadTooLargeError(f"Body of {size} bytes exceeds {limit} bytes")

    def _send_error(self, conn: socket.socket, status: int) -> None:
        message = OutgoingMessage()
        message.status_code = status
        message.set_header("Connection", "close")
        message.end(message.status_message)
        try:
            conn.sendall(message.to_bytes())
        except OSError as e:
            logger.debug(f"Failed writing {status} response: {e}")


class PayloadTooLargeError(Exception):
    """Raised when a request body exceeds the configured limit."""

    pass


__all__ = [
    "HTTPServer",
    "PayloadTooLargeError",
    "RequestHandler",
]
