"""Application ports (interfaces). Implemented by infrastructure adapters."""

from collections.abc import Callable
from typing import Protocol

from unichat.application.dto import ChatMessage
from unichat.domain import Contact

SnapshotCallback = Callable[[list[ChatMessage]], None]
ErrorCallback = Callable[[Exception], None]


class LocalContactStore(Protocol):
    """Durable on-device contact records. No uniqueness enforcement."""

    def insert(self, contact: Contact) -> None:
        """Append one record. Raises LocalStorageFailure if storage is unavailable."""
        ...

    def list_all(self) -> list[Contact]:
        """Return every inserted contact, in insertion order."""
        ...


class RemoteContactCollection(Protocol):
    """Remote document collection holding {name, phone_number} documents."""

    def fetch_all_once(self) -> list[Contact]:
        """Read the whole collection. Drops documents missing a required field.
        Raises RemoteFetchFailure on transport or permission errors.
        """
        ...

    def push(self, contact: Contact) -> None:
        """Write one new document. Raises RemoteWriteFailure."""
        ...


class Subscription(Protocol):
    """Handle for a live subscription."""

    def cancel(self) -> None:
        """Stop delivering snapshots. Safe to call more than once."""
        ...


class RemoteMessageCollection(Protocol):
    """Remote document collection holding {sender, content, timestamp} documents."""

    def subscribe(
        self, on_update: SnapshotCallback, on_error: ErrorCallback
    ) -> Subscription:
        """Deliver the full snapshot, ordered by timestamp ascending, on every change.
        Errors go to on_error and do not end the subscription.
        """
        ...

    def send(self, sender: str, content: str) -> None:
        """Append a message stamped with the current epoch milliseconds. Raises RemoteWriteFailure."""
        ...
