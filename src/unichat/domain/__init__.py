"""Domain layer: entities and value objects. No dependencies on outer layers."""

from unichat.domain.entities import Contact, Message

__all__ = ["Contact", "Message"]
