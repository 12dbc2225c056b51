"""Neo4j implementation of the remote contact and message collections.
Each document is one node carrying a `collection` property, so several logical
collections (e.g. one per chat room) can share a database:
(:Contact {collection, name, phoneNumber, created_at})
(:Message {collection, sender, content, timestamp})
Property names match the document fields used by the mobile clients.
"""

import logging

from neo4j.exceptions import DriverError, Neo4jError

from unichat.application.dto import ChatMessage
from unichat.application.errors import RemoteFetchFailure, RemoteWriteFailure
from unichat.application.ports import ErrorCallback, SnapshotCallback
from unichat.domain import Contact, Message
from unichat.infrastructure.documents import now_millis, parse_contacts, parse_messages
from unichat.infrastructure.subscription import DEFAULT_POLL_INTERVAL, PollingSubscription

logger = logging.getLogger(__name__)

CONTACTS_COLLECTION = "contacts"
MESSAGES_COLLECTION = "messages"

_INDEX_QUERIES = (
    "CREATE INDEX contact_collection IF NOT EXISTS FOR (c:Contact) ON (c.collection)",
    "CREATE INDEX message_collection_timestamp IF NOT EXISTS "
    "FOR (m:Message) ON (m.collection, m.timestamp)",
)


def ensure_indexes(driver) -> None:
    """Create the lookup indexes for both collections if missing."""
    with driver.session() as session:
        for query in _INDEX_QUERIES:
            session.run(query)


class Neo4jContactCollection:
    """Remote contact collection stored as :Contact nodes, read back in write order."""

    def __init__(self, driver: object, collection: str = CONTACTS_COLLECTION) -> None:
        self._driver = driver
        self._collection = collection

    def fetch_all_once(self) -> list[Contact]:
        try:
            with self._driver.session() as session:
                result = session.run(
                    """
                    MATCH (c:Contact {collection: $collection})
                    RETURN c
                    ORDER BY c.created_at
                    """,
                    collection=self._collection,
                )
                documents = [record["c"] for record in result]
        except (DriverError, Neo4jError) as e:
            raise RemoteFetchFailure(f"Could not fetch contacts: {e}") from e
        return parse_contacts(documents)

    def push(self, contact: Contact) -> None:
        try:
            with self._driver.session() as session:
                session.run(
                    """
                    CREATE (c:Contact {
                        collection: $collection,
                        name: $name,
                        phoneNumber: $phone_number,
                        created_at: $created_at
                    })
                    """,
                    collection=self._collection,
                    name=contact.name,
                    phone_number=contact.phone_number,
                    created_at=now_millis(),
                ).consume()
        except (DriverError, Neo4jError) as e:
            raise RemoteWriteFailure(f"Could not add contact: {e}") from e


class Neo4jMessageCollection:
    """Remote message collection stored as :Message nodes.
    Neo4j has no change feed here, so subscribe() polls the ordered snapshot.
    """

    def __init__(
        self,
        driver: object,
        collection: str = MESSAGES_COLLECTION,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._driver = driver
        self._collection = collection
        self._poll_interval = poll_interval

    def subscribe(
        self, on_update: SnapshotCallback, on_error: ErrorCallback
    ) -> PollingSubscription:
        """Start polling. Must be called from a running event loop."""
        return PollingSubscription(
            self.read_snapshot,
            on_update,
            on_error,
            poll_interval=self._poll_interval,
        )

    def send(self, sender: str, content: str) -> None:
        message = Message(sender=sender, content=content, timestamp=now_millis())
        try:
            with self._driver.session() as session:
                session.run(
                    """
                    CREATE (m:Message {
                        collection: $collection,
                        sender: $sender,
                        content: $content,
                        timestamp: $timestamp
                    })
                    """,
                    collection=self._collection,
                    sender=message.sender,
                    content=message.content,
                    timestamp=message.timestamp,
                ).consume()
        except (DriverError, Neo4jError) as e:
            raise RemoteWriteFailure(f"Could not send message: {e}") from e

    def read_snapshot(self) -> list[ChatMessage]:
        """Return all messages ordered by timestamp ascending."""
        try:
            with self._driver.session() as session:
                result = session.run(
                    """
                    MATCH (m:Message {collection: $collection})
                    RETURN m
                    ORDER BY m.timestamp ASC
                    """,
                    collection=self._collection,
                )
                documents = [record["m"] for record in result]
        except (DriverError, Neo4jError) as e:
            raise RemoteFetchFailure(f"Could not fetch messages: {e}") from e
        return parse_messages(documents)
