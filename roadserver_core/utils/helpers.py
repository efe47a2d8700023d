"""Helper utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

# Content types that carry an implicit UTF-8 charset
_UTF8_TYPES = {
    "application/json",
    "application/javascript",
    "application/x-javascript",
    "application/xml",
    "image/svg+xml",
}

_CHARSET_RE = re.compile(r";\s*charset\s*=", re.IGNORECASE)

# Characters left untouched when encoding a URL for the Location header
_URL_SAFE = "!#$%&'()*+,/:;=?@[]~"


def parse_content_type(content_type: str) -> Tuple[str, Dict[str, str]]:
    """Parse Content-Type header."""
    parts = content_type.split(";")
    media_type = parts[0].strip().lower()

    params = {}
    for part in parts[1:]:
        if "=" in part:
            key, value = part.split("=", 1)
            params[key.strip().lower()] = value.strip().strip('"')

    return media_type, params


def charset_for(media_type: str) -> Optional[str]:
    """Return the default charset of a media type, if it has one."""
    media_type = media_type.strip().lower()
    if media_type.startswith("text/") or media_type in _UTF8_TYPES:
        return "utf-8"
    return None


def with_charset(content_type: str) -> str:
    """Append the default charset to a Content-Type value lacking one."""
    if _CHARSET_RE.search(content_type):
        return content_type
    charset = charset_for(content_type.split(";")[0])
    if charset:
        return f"{content_type}; charset={charset}"
    return content_type


def encode_url(url: str) -> str:
    """Percent-encode a URL, keeping reserved characters and existing escapes."""
    return quote(url, safe=_URL_SAFE)


def normalize_path(path: str) -> str:
    """Normalize a mount-relative path.

    Collapses an empty path to ``/`` and leading slashes to a single one.
    """
    if not path:
        return "/"
    return "/" + path.lstrip("/")


def strip_prefix(url: str, prefix: str) -> str:
    """Remove a mount prefix from the path of a request target.

    Works on origin-form (``/cat/42?x=1``) and absolute-form
    (``http://host/cat/42``) targets; only the path component changes.
    A ``/`` prefix leaves the target as is.
    """
    if not prefix or prefix == "/":
        return url

    parts = urlsplit(url)
    path = parts.path
    if path.startswith(prefix):
        path = path[len(prefix):]
    return urlunsplit(parts._replace(path=normalize_path(path)))


__all__ = [
    "parse_content_type",
    "charset_for",
    "with_charset",
    "encode_url",
    "normalize_path",
    "strip_prefix",
]
