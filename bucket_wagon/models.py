"""Domain models passed between the host, the adapter and its listeners."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class RequestType(Enum):
    GET = "get"
    PUT = "put"


class TransferEventType(Enum):
    INITIATED = "initiated"
    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"


class SessionEventType(Enum):
    OPENING = "opening"
    OPENED = "opened"
    DISCONNECTING = "disconnecting"
    DISCONNECTED = "disconnected"


@dataclass
class Repository:
    """Repository definition supplied by the host build tool."""

    id: str
    url: str


@dataclass
class AuthenticationInfo:
    """Key id / application key pair taken from the host's credential store."""

    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.username) and bool(self.password)

    def __repr__(self) -> str:
        return f"AuthenticationInfo(username={self.username!r}, password=***)"


@dataclass
class Resource:
    name: str
    content_length: Optional[int] = None
    last_modified: Optional[int] = None


@dataclass(frozen=True)
class RemoteFile:
    """Result of a metadata lookup. ``upload_timestamp`` is in epoch milliseconds."""

    key: str
    upload_timestamp: int
    content_length: int
    content_type: Optional[str] = None


@dataclass(frozen=True)
class BucketIdentity:
    name: str
    region: Optional[str] = None


@dataclass(frozen=True)
class TransferEvent:
    event_type: TransferEventType
    request_type: RequestType
    resource: Resource
    local_file: Path
    exception: Optional[BaseException] = None


@dataclass(frozen=True)
class SessionEvent:
    event_type: SessionEventType
    repository: Repository
