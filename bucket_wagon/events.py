"""Listener registration and event dispatch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .interfaces import SessionListener, TransferListener
from .models import (
    Repository,
    RequestType,
    Resource,
    SessionEvent,
    SessionEventType,
    TransferEvent,
    TransferEventType,
)

logger = logging.getLogger(__name__)


class TransferEventSupport:
    def __init__(self) -> None:
        self._listeners: List[TransferListener] = []

    def add(self, listener: TransferListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove(self, listener: TransferListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def has(self, listener: TransferListener) -> bool:
        return listener in self._listeners

    def fire(
        self,
        event_type: TransferEventType,
        request_type: RequestType,
        resource: Resource,
        local_file: Path,
        exception: Optional[BaseException] = None,
    ) -> None:
        event = TransferEvent(
            event_type=event_type,
            request_type=request_type,
            resource=resource,
            local_file=local_file,
            exception=exception,
        )
        for listener in list(self._listeners):
            if event_type is TransferEventType.INITIATED:
                listener.transfer_initiated(event)
            elif event_type is TransferEventType.STARTED:
                listener.transfer_started(event)
            elif event_type is TransferEventType.COMPLETED:
                listener.transfer_completed(event)
            else:
                listener.transfer_error(event)


class SessionEventSupport:
    def __init__(self) -> None:
        self._listeners: List[SessionListener] = []

    def add(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def fire(self, event_type: SessionEventType, repository: Repository) -> None:
        event = SessionEvent(event_type=event_type, repository=repository)
        for listener in list(self._listeners):
            getattr(listener, f"session_{event_type.value}")(event)


class LoggingTransferListener(TransferListener):
    """Writes one log line per transfer event."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logger

    def transfer_initiated(self, event: TransferEvent) -> None:
        self._log.debug("%s %s initiated", event.request_type.value.upper(), event.resource.name)

    def transfer_started(self, event: TransferEvent) -> None:
        direction = "from" if event.request_type is RequestType.GET else "to"
        self._log.info(
            "%s %s %s repository (local file %s)",
            "Downloading" if event.request_type is RequestType.GET else "Uploading",
            event.resource.name,
            direction,
            event.local_file,
        )

    def transfer_completed(self, event: TransferEvent) -> None:
        self._log.info(
            "%s %s completed (%s bytes)",
            event.request_type.value.upper(),
            event.resource.name,
            event.resource.content_length if event.resource.content_length is not None else "?",
        )

    def transfer_error(self, event: TransferEvent) -> None:
        self._log.error("%s %s failed: %s", event.request_type.value.upper(), event.resource.name, event.exception)
