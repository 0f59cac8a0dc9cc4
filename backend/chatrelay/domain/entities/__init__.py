"""
ENTITIES - Business objects with identity

Each entity:
- Has a unique identifier
- Pure Python dataclasses (no ORM, no Pydantic)
"""

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Attachment, Message
from chatrelay.domain.entities.connection import Connection, ConnectionState

__all__ = [
    "Identity",
    "Attachment",
    "Message",
    "Connection",
    "ConnectionState",
]
