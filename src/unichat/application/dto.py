"""Result and notice types for the contact and chat flows."""

from dataclasses import dataclass

from unichat.domain import Contact


@dataclass(frozen=True)
class ChatMessage:
    """One message as shown in the chat view. Ordering already applied upstream."""

    sender: str
    content: str


@dataclass(frozen=True)
class Notice:
    """Transient, dismissible message for the user (toast/snackbar)."""

    message: str


# --- add_contact / send results ---


@dataclass(frozen=True)
class ContactAdded:
    """Contact was stored locally; the remote push runs in the background."""

    contact: Contact


@dataclass(frozen=True)
class MessageQueued:
    """Message write was started. The outcome is reported only via notices."""

    sender: str
    content: str


@dataclass(frozen=True)
class Invalid:
    """Input rejected before any I/O (e.g. empty name or phone number)."""

    reason: str
