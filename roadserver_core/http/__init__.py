"""HTTP module - Wire messages, request/response contexts and the listener."""

from roadserver_core.http.message import IncomingMessage, OutgoingMessage, RequestParseError
from roadserver_core.http.request import Request, parse_body
from roadserver_core.http.response import Response
from roadserver_core.http.cookies import CookieError
from roadserver_core.http.server import HTTPServer, PayloadTooLargeError

__all__ = [
    "IncomingMessage",
    "OutgoingMessage",
    "RequestParseError",
    "Request",
    "parse_body",
    "Response",
    "CookieError",
    "HTTPServer",
    "PayloadTooLargeError",
]
