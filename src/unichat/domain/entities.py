"""Domain entities: Contact and Message."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Contact:
    """
    A person the user can chat with.
    The phone number is the identity: two contacts sharing one are the same entity.
    A Contact is immutable once created.
    """

    name: str
    phone_number: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Contact name must be non-empty.")
        if not self.phone_number or not self.phone_number.strip():
            raise ValueError("Contact phone number must be non-empty.")


@dataclass(frozen=True)
class Message:
    """
    One chat message as stored in the remote collection.
    timestamp is epoch milliseconds, assigned by the sender at write time.
    """

    sender: str
    content: str
    timestamp: int
