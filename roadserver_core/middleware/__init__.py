"""Middleware module - Mounted middleware and built-in middleware."""

from roadserver_core.middleware.base import MiddlewareEntry, MiddlewareStack
from roadserver_core.middleware.logging import LoggingConfig, access_logger, request_logger
from roadserver_core.middleware.cookies import cookie_parser

__all__ = [
    "MiddlewareEntry",
    "MiddlewareStack",
    "LoggingConfig",
    "access_logger",
    "request_logger",
    "cookie_parser",
]
