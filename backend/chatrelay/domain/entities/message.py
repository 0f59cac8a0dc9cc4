"""
Message Entity - A persisted chat message, immutable once created.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.value_objects.message_id import MessageId


@dataclass(frozen=True)
class Attachment:
    url: str
    content_type: str
    size: int
    filename: Optional[str] = None

    def __post_init__(self):
        if not self.url:
            raise ValueError("Attachment must have a URL.")
        if self.size < 0:
            raise ValueError("Attachment size cannot be negative.")


@dataclass(frozen=True)
class Message:
    id: MessageId
    sender: Identity
    created_at: datetime
    text: Optional[str] = None
    attachment: Optional[Attachment] = None

    def __post_init__(self):
        if not self.text and self.attachment is None:
            raise ValueError("Message needs text or an attachment.")
