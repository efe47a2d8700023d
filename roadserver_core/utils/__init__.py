"""Utils module - Utility functions."""

from roadserver_core.utils.config import (
    AppConfig,
    load_config,
)
from roadserver_core.utils.helpers import (
    parse_content_type,
    strip_prefix,
    with_charset,
)
from roadserver_core.utils.logging import configure_logging

__all__ = [
    "AppConfig",
    "load_config",
    "parse_content_type",
    "strip_prefix",
    "with_charset",
    "configure_logging",
]
