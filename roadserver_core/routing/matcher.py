"""Path Matcher - Route pattern compilation and matching.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple
from urllib.parse import unquote

# Name under which a "*" segment exposes the remainder of the path
WILDCARD_PARAM = "0"

_PARAM_NAME_RE = re.compile(r"^\w+$")


@dataclass(frozen=True)
class MatchResult:
    """Outcome of testing a path against a compiled pattern."""

    matched: bool
    params: Dict[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.matched


class PathMatcher:
    """URL path pattern matcher.

    Supports:
    - Exact matches: /users
    - Path parameters: /users/:id
    - Optional segments: /users/:id?
    - Wildcards: /files/*

    Matching is anchored to the whole path and case-sensitive. Parameter
    values are percent-decoded.

    Usage:
        matcher = compile_pattern("/cat/:id")
        result = matcher("/cat/42")
        if result:
            result.params  # {"id": "42"}
    """

    def __init__(self, pattern: str):
        self.pattern = pattern
        self._regex, self._param_names = _compile(pattern)

    @property
    def param_names(self) -> List[str]:
        return list(self._param_names)

    def __call__(self, path: str) -> MatchResult:
        match = self._regex.fullmatch(path)
        if match is None:
            return MatchResult(matched=False)

        params: Dict[str, str] = {}
        for index, name in enumerate(self._param_names):
            value = match.group(f"p{index}")
            if value is not None:
                params[name] = unquote(value)
        return MatchResult(matched=True, params=params)

    def __repr__(self) -> str:
        return f"PathMatcher({self.pattern!r})"


def _compile(pattern: str) -> Tuple[re.Pattern, List[str]]:
    """Compile pattern to an anchored regex with one group per parameter."""
    param_names: List[str] = []
    regex_parts: List[str] = []

    for segment in pattern.split("/"):
        if not segment:
            continue

        group = f"p{len(param_names)}"
        if segment.startswith(":"):
            # Path parameter
            param_name = segment[1:]
            optional = param_name.endswith("?")
            if optional:
                param_name = param_name[:-1]
            if not _PARAM_NAME_RE.match(param_name):
                raise ValueError(
                    f"Invalid parameter name {segment!r} in pattern {pattern!r}"
                )
            if optional:
                regex_parts.append(f"(?:/(?P<{group}>[^/]+))?")
            else:
                regex_parts.append(f"/(?P<{group}>[^/]+)")
            param_names.append(param_name)
        elif segment == "*":
            # Wildcard
            regex_parts.append(f"(?:/(?P<{group}>.*))?")
            param_names.append(WILDCARD_PARAM)
        else:
            # Exact match
            regex_parts.append(f"/{re.escape(segment)}")

    if not regex_parts:
        regex_parts.append("/")
    elif pattern.endswith("/") and not pattern.endswith("*/"):
        regex_parts.append("/")

    return re.compile("".join(regex_parts)), param_names


@functools.lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> PathMatcher:
    """Compile a route pattern (cached per pattern string)."""
    return PathMatcher(pattern)


__all__ = [
    "MatchResult",
    "PathMatcher",
    "compile_pattern",
    "WILDCARD_PARAM",
]
