"""Configuration utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import yaml

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="AppConfig")

DEFAULT_ENV_PREFIX = "ROADSERVER_"


@dataclass
class AppConfig:
    """Application server configuration."""

    # Listener settings
    host: str = "0.0.0.0"
    port: int = 3000
    backlog: int = 1024
    timeout: Optional[float] = None
    max_request_size: int = 10 * 1024 * 1024  # 10MB

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    access_log: bool = False

    # Cookies
    cookie_secret: str = ""

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """Create config from dictionary."""
        # Filter to only valid fields
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        for f in fields(cls):
            # Environment values such as "1234" arrive typed as numbers
            if f.type == "str" and f.name in filtered:
                filtered[f.name] = str(filtered[f.name])
        ignored = set(data) - valid_fields
        if ignored:
            logger.warning(f"Ignoring unknown config keys: {sorted(ignored)}")
        return cls(**filtered)

    @classmethod
    def from_json(cls: Type[T], path: str) -> T:
        """Load config from JSON file."""
        return cls.from_dict(_read_json(path))

    @classmethod
    def from_yaml(cls: Type[T], path: str) -> T:
        """Load config from YAML file."""
        return cls.from_dict(_read_yaml(path))

    @classmethod
    def from_env(cls: Type[T], prefix: str = DEFAULT_ENV_PREFIX) -> T:
        """Load config from environment variables."""
        return cls.from_dict(env_values(prefix))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def merge(self, overrides: Dict[str, Any]) -> "AppConfig":
        """Return a copy with the given values taking precedence."""
        data = self.to_dict()
        data.update(overrides)
        return type(self).from_dict(data)


def env_values(prefix: str = DEFAULT_ENV_PREFIX) -> Dict[str, Any]:
    """Collect prefixed environment variables as typed config values."""
    data: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        config_key = key[len(prefix):].lower()

        # Type conversion
        if value.lower() in ("true", "false"):
            data[config_key] = value.lower() == "true"
        elif value.isdigit():
            data[config_key] = int(value)
        else:
            try:
                data[config_key] = float(value)
            except ValueError:
                data[config_key] = value

    return data


def _read_json(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return json.load(f) or {}


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(
    path: Optional[str] = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
) -> AppConfig:
    """Load configuration from multiple sources.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (if provided)
    3. Defaults
    """
    data: Dict[str, Any] = {}

    # Load from file if provided
    if path:
        if Path(path).exists():
            if path.endswith(".json"):
                data.update(_read_json(path))
            elif path.endswith((".yaml", ".yml")):
                data.update(_read_yaml(path))
            else:
                logger.warning(f"Unknown config format: {path}")
        else:
            logger.warning(f"Config file not found: {path}")

    # Override with environment variables
    data.update(env_values(env_prefix))

    return AppConfig.from_dict(data)


__all__ = [
    "AppConfig",
    "DEFAULT_ENV_PREFIX",
    "env_values",
    "load_config",
]
