"""Interface definitions for collaborators notified by the adapter."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import SessionEvent, TransferEvent


class TransferListener(ABC):
    """Receives lifecycle events for every fetch and store."""

    @abstractmethod
    def transfer_initiated(self, event: TransferEvent) -> None:
        """Called before anything is resolved or opened."""

    @abstractmethod
    def transfer_started(self, event: TransferEvent) -> None:
        """Called right before bytes start moving."""

    @abstractmethod
    def transfer_completed(self, event: TransferEvent) -> None:
        """Called once the local or remote copy is in place."""

    def transfer_error(self, event: TransferEvent) -> None:
        """Called when the transfer fails. Optional."""


class SessionListener(ABC):
    """Receives connect/disconnect notifications."""

    @abstractmethod
    def session_opening(self, event: SessionEvent) -> None:
        ...

    @abstractmethod
    def session_opened(self, event: SessionEvent) -> None:
        ...

    @abstractmethod
    def session_disconnecting(self, event: SessionEvent) -> None:
        ...

    @abstractmethod
    def session_disconnected(self, event: SessionEvent) -> None:
        ...
