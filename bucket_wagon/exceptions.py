"""Error taxonomy raised at the adapter boundary.

Every vendor SDK failure is translated into one of the five kinds below, with
the original exception chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Dict, Optional


class WagonError(Exception):
    """Base exception for all transport errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(WagonError):
    """Raised when the repository URL or local configuration is invalid."""


class AuthError(WagonError):
    """Raised when credentials are missing or rejected."""


class RepositoryConnectionError(WagonError):
    """Raised when the bucket cannot be reached or confirmed to exist."""


class NotFoundError(WagonError):
    """Raised when the requested remote key does not exist."""


class TransferError(WagonError):
    """Raised for any other failure while moving bytes."""


__all__ = [
    "WagonError",
    "ConfigurationError",
    "AuthError",
    "RepositoryConnectionError",
    "NotFoundError",
    "TransferError",
]
