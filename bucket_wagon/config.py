"""Configuration models and helpers for the bucket transport."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import json

from .exceptions import ConfigurationError


@dataclass
class WagonConfig:
    """Client-side settings shared by every connection an adapter opens."""

    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    user_agent: str = "bucket-wagon/0.1"
    # Download anyway when the freshness lookup fails for a reason other than not-found.
    assume_stale_on_lookup_error: bool = True
    connect_timeout: float = 60.0
    read_timeout: float = 60.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WagonConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                details={"keys": ",".join(unknown)},
            )
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> "WagonConfig":
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"Cannot read configuration file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
        return cls.from_dict(data)


DEFAULT_CONFIG = WagonConfig()
