"""In-memory implementations of the store and collection ports (no DB)."""

from collections.abc import Callable, Iterable, Mapping

from unichat.application.dto import ChatMessage
from unichat.application.errors import RemoteFetchFailure, RemoteWriteFailure
from unichat.application.ports import ErrorCallback, SnapshotCallback
from unichat.domain import Contact, Message
from unichat.infrastructure.documents import (
    TIMESTAMP_FIELD,
    contact_to_document,
    message_to_document,
    now_millis,
    parse_contacts,
    parse_messages,
)


class InMemoryContactStore:
    """Local contact store kept in a list. Order preserved by insertion; duplicates allowed."""

    def __init__(self, contacts: Iterable[Contact] = ()) -> None:
        self._contacts: list[Contact] = list(contacts)

    def insert(self, contact: Contact) -> None:
        self._contacts.append(contact)

    def list_all(self) -> list[Contact]:
        return list(self._contacts)


class InMemoryContactCollection:
    """Remote contact collection held in memory. Set online=False to simulate an outage."""

    def __init__(self, documents: Iterable[Mapping] = ()) -> None:
        self._documents: list[dict] = [dict(d) for d in documents]
        self.online = True

    @property
    def documents(self) -> list[dict]:
        return [dict(d) for d in self._documents]

    def fetch_all_once(self) -> list[Contact]:
        if not self.online:
            raise RemoteFetchFailure("Contact collection is unreachable.")
        return parse_contacts(self._documents)

    def push(self, contact: Contact) -> None:
        if not self.online:
            raise RemoteWriteFailure("Contact collection is unreachable.")
        self._documents.append(contact_to_document(contact))


class _InMemorySubscription:
    def __init__(
        self,
        collection: "InMemoryMessageCollection",
        on_update: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> None:
        self._collection = collection
        self.on_update = on_update
        self.on_error = on_error
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._collection._unsubscribe(self)


class InMemoryMessageCollection:
    """Remote message collection held in memory.

    Subscribers get the current snapshot on subscribe and again after every write,
    synchronously on the writer's thread.
    """

    def __init__(
        self,
        documents: Iterable[Mapping] = (),
        *,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self._documents: list[dict] = [dict(d) for d in documents]
        self._subscribers: list[_InMemorySubscription] = []
        self._clock = clock
        self.online = True

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(
        self, on_update: SnapshotCallback, on_error: ErrorCallback
    ) -> _InMemorySubscription:
        subscription = _InMemorySubscription(self, on_update, on_error)
        self._subscribers.append(subscription)
        on_update(self.snapshot())
        return subscription

    def send(self, sender: str, content: str) -> None:
        if not self.online:
            raise RemoteWriteFailure("Message collection is unreachable.")
        message = Message(sender=sender, content=content, timestamp=self._clock())
        self.add_document(message_to_document(message))

    def add_document(self, document: Mapping) -> None:
        """Insert a raw document (as another client would) and notify subscribers."""
        self._documents.append(dict(document))
        snapshot = self.snapshot()
        for subscription in list(self._subscribers):
            subscription.on_update(list(snapshot))

    def fail_subscribers(self, error: Exception) -> None:
        """Report a transport error to every active subscriber."""
        for subscription in list(self._subscribers):
            subscription.on_error(error)

    def snapshot(self) -> list[ChatMessage]:
        ordered = sorted(self._documents, key=lambda d: d.get(TIMESTAMP_FIELD) or 0)
        return parse_messages(ordered)

    def _unsubscribe(self, subscription: _InMemorySubscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)
