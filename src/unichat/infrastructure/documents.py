"""Remote document shapes for contacts and messages, and their parsing."""

import time
from collections.abc import Iterable, Mapping

from unichat.application.dto import ChatMessage
from unichat.domain import Contact, Message

# Field names shared with the mobile clients.
NAME_FIELD = "name"
PHONE_FIELD = "phoneNumber"
SENDER_FIELD = "sender"
CONTENT_FIELD = "content"
TIMESTAMP_FIELD = "timestamp"


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def contact_to_document(contact: Contact) -> dict:
    return {NAME_FIELD: contact.name, PHONE_FIELD: contact.phone_number}


def contact_from_document(document: Mapping) -> Contact | None:
    """Return a Contact, or None if name or phone number is missing or blank."""
    name = document.get(NAME_FIELD)
    phone_number = document.get(PHONE_FIELD)
    if not isinstance(name, str) or not isinstance(phone_number, str):
        return None
    try:
        return Contact(name=name, phone_number=phone_number)
    except ValueError:
        return None


def message_to_document(message: Message) -> dict:
    return {
        SENDER_FIELD: message.sender,
        CONTENT_FIELD: message.content,
        TIMESTAMP_FIELD: message.timestamp,
    }


def chat_message_from_document(document: Mapping) -> ChatMessage | None:
    """Return the {sender, content} pair, or None if either is missing."""
    sender = document.get(SENDER_FIELD)
    content = document.get(CONTENT_FIELD)
    if not isinstance(sender, str) or not isinstance(content, str):
        return None
    return ChatMessage(sender=sender, content=content)


def parse_contacts(documents: Iterable[Mapping]) -> list[Contact]:
    out = []
    for document in documents:
        contact = contact_from_document(document)
        if contact is not None:
            out.append(contact)
    return out


def parse_messages(documents: Iterable[Mapping]) -> list[ChatMessage]:
    """Parse documents already ordered by timestamp. Incomplete ones are dropped."""
    out = []
    for document in documents:
        message = chat_message_from_document(document)
        if message is not None:
            out.append(message)
    return out
