"""Infrastructure layer: concrete implementations of application ports."""

from unichat.infrastructure.memory import (
    InMemoryContactCollection,
    InMemoryContactStore,
    InMemoryMessageCollection,
)
from unichat.infrastructure.persistence.neo4j_collections import (
    Neo4jContactCollection,
    Neo4jMessageCollection,
    ensure_indexes,
)
from unichat.infrastructure.phone import calling_codes, compose_phone_number
from unichat.infrastructure.sqlite_store import SqliteContactStore
from unichat.infrastructure.subscription import PollingSubscription

__all__ = [
    "InMemoryContactCollection",
    "InMemoryContactStore",
    "InMemoryMessageCollection",
    "Neo4jContactCollection",
    "Neo4jMessageCollection",
    "PollingSubscription",
    "SqliteContactStore",
    "calling_codes",
    "compose_phone_number",
    "ensure_indexes",
]
