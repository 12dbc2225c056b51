"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from unichat.application.chat_session import ChatSession
from unichat.application.contact_sync import (
    STATE_FETCHING,
    STATE_IDLE,
    STATE_MERGED,
    ContactSync,
    merged_view,
)
from unichat.application.dto import (
    ChatMessage,
    ContactAdded,
    Invalid,
    MessageQueued,
    Notice,
)
from unichat.application.errors import (
    LocalStorageFailure,
    RemoteFetchFailure,
    RemoteWriteFailure,
    SyncError,
)
from unichat.application.ports import (
    LocalContactStore,
    RemoteContactCollection,
    RemoteMessageCollection,
    Subscription,
)

__all__ = [
    "STATE_FETCHING",
    "STATE_IDLE",
    "STATE_MERGED",
    "ChatMessage",
    "ChatSession",
    "ContactAdded",
    "ContactSync",
    "Invalid",
    "LocalContactStore",
    "LocalStorageFailure",
    "MessageQueued",
    "Notice",
    "RemoteContactCollection",
    "RemoteFetchFailure",
    "RemoteMessageCollection",
    "RemoteWriteFailure",
    "Subscription",
    "SyncError",
    "merged_view",
]
