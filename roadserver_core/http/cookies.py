"""Cookies - Cookie parsing, Set-Cookie serialization and signing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Signed values are produced with ``itsdangerous`` and carry an ``s:`` prefix;
JSON values carry a ``j:`` prefix.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Dict, Optional, Union
from urllib.parse import quote, unquote

from itsdangerous import BadSignature, Signer

SIGNED_PREFIX = "s:"
JSON_PREFIX = "j:"

# RFC 7230 token
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

_SAME_SITE = {
    True: "Strict",
    "strict": "Strict",
    "lax": "Lax",
    "none": "None",
}


def parse_cookies(header: str) -> Dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Returns an empty dict for empty or missing headers. The first
    occurrence of a name wins.
    """
    if not header:
        return {}
    cookies: Dict[str, str] = {}
    for pair in header.split(";"):
        pair = pair.strip()
        if "=" not in pair:
            continue
        key, _, value = pair.partition("=")
        key = key.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        if key not in cookies:
            cookies[key] = unquote(value)
    return cookies


def serialize_cookie(
    name: str,
    value: str,
    max_age: Optional[int] = None,
    expires: Optional[datetime] = None,
    path: Optional[str] = "/",
    domain: Optional[str] = None,
    secure: bool = False,
    http_only: bool = False,
    same_site: Union[str, bool, None] = None,
) -> str:
    """Serialize a ``Set-Cookie`` header value.

    Args:
        name: Cookie name (must be a token)
        value: Cookie value, percent-encoded on output
        max_age: Max-Age in seconds
        expires: Expiry datetime (naive values are taken as UTC)
        path: Cookie path
        domain: Cookie domain
        secure: Set the Secure attribute
        http_only: Set the HttpOnly attribute
        same_site: True/"strict", "lax" or "none"
    """
    if not _TOKEN_RE.match(name):
        raise ValueError(f"Invalid cookie name: {name!r}")

    parts = [f"{name}={quote(value, safe='')}"]
    if max_age is not None:
        parts.append(f"Max-Age={int(max_age)}")
    if domain:
        parts.append(f"Domain={domain}")
    if path:
        parts.append(f"Path={path}")
    if expires is not None:
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        parts.append(f"Expires={format_datetime(expires.astimezone(timezone.utc), usegmt=True)}")
    if http_only:
        parts.append("HttpOnly")
    if secure:
        parts.append("Secure")
    if same_site:
        key = same_site if same_site is True else str(same_site).lower()
        if key not in _SAME_SITE:
            raise ValueError(f"Invalid SameSite value: {same_site!r}")
        parts.append(f"SameSite={_SAME_SITE[key]}")
    return "; ".join(parts)


def encode_value(value: Any) -> str:
    """Encode a cookie value; dicts and lists become ``j:`` JSON."""
    if isinstance(value, (dict, list)):
        return JSON_PREFIX + json.dumps(value, separators=(",", ":"))
    return str(value)


def decode_value(value: str) -> Any:
    """Decode a ``j:`` JSON cookie value, returning other values unchanged."""
    if value.startswith(JSON_PREFIX):
        try:
            return json.loads(value[len(JSON_PREFIX):])
        except ValueError:
            return value
    return value


def sign_value(value: str, secret: str) -> str:
    """Sign a cookie value with the given secret."""
    return SIGNED_PREFIX + Signer(secret).sign(value).decode("utf-8")


def unsign_value(value: str, secret: str) -> Optional[str]:
    """Verify a signed cookie value.

    Returns:
        The original value, or None if the signature does not verify
    """
    if not value.startswith(SIGNED_PREFIX):
        return None
    try:
        return Signer(secret).unsign(value[len(SIGNED_PREFIX):]).decode("utf-8")
    except BadSignature:
        return None


class CookieError(Exception):
    """Raised when a cookie cannot be set as requested."""

    pass


__all__ = [
    "CookieError",
    "parse_cookies",
    "serialize_cookie",
    "encode_value",
    "decode_value",
    "sign_value",
    "unsign_value",
]
