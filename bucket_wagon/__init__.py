"""Object-storage repository transport exposing the public API."""

from .cache import BucketIdentityCache
from .config import WagonConfig
from .events import LoggingTransferListener
from .exceptions import (
    AuthError,
    ConfigurationError,
    NotFoundError,
    RepositoryConnectionError,
    TransferError,
    WagonError,
)
from .interfaces import SessionListener, TransferListener
from .location import RemoteLocation, parse_repository_url
from .models import AuthenticationInfo, RemoteFile, Repository, Resource
from .wagon import BucketWagon

__all__ = [
    "AuthError",
    "AuthenticationInfo",
    "BucketIdentityCache",
    "BucketWagon",
    "ConfigurationError",
    "LoggingTransferListener",
    "NotFoundError",
    "RemoteFile",
    "RemoteLocation",
    "Repository",
    "RepositoryConnectionError",
    "Resource",
    "SessionListener",
    "TransferError",
    "TransferListener",
    "WagonConfig",
    "WagonError",
    "parse_repository_url",
]
