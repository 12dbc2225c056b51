"""
UniChat core: clean-architecture layout.

- domain: entities (Contact, Message). No outer dependencies.
- application: use cases (ContactSync, ChatSession), ports, DTOs, errors.
- infrastructure: adapters (in-memory, SQLite local store, Neo4j remote collections).
"""

from unichat.application import (
    ChatMessage,
    ChatSession,
    ContactAdded,
    ContactSync,
    Invalid,
    LocalStorageFailure,
    MessageQueued,
    Notice,
    RemoteFetchFailure,
    RemoteWriteFailure,
    SyncError,
    merged_view,
)
from unichat.domain import Contact, Message
from unichat.infrastructure import (
    InMemoryContactCollection,
    InMemoryContactStore,
    InMemoryMessageCollection,
    Neo4jContactCollection,
    Neo4jMessageCollection,
    SqliteContactStore,
)

__all__ = [
    "ChatMessage",
    "ChatSession",
    "Contact",
    "ContactAdded",
    "ContactSync",
    "InMemoryContactCollection",
    "InMemoryContactStore",
    "InMemoryMessageCollection",
    "Invalid",
    "LocalStorageFailure",
    "Message",
    "MessageQueued",
    "Neo4jContactCollection",
    "Neo4jMessageCollection",
    "Notice",
    "RemoteFetchFailure",
    "RemoteWriteFailure",
    "SqliteContactStore",
    "SyncError",
    "merged_view",
]
