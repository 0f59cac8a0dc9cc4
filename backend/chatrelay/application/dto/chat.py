"""Chat DTOs for API responses and WebSocket payloads."""

from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel
from typing import Optional

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Attachment, Message


class IdentityDTO(BaseModel):
    """Public view of a user: never carries credentials."""

    id: str
    display_name: str

    @classmethod
    def from_entity(cls, identity: Identity) -> IdentityDTO:
        return cls(id=identity.id.value, display_name=identity.display_name)


class AttachmentDTO(BaseModel):
    url: str
    content_type: str
    size: int
    filename: Optional[str] = None

    @classmethod
    def from_entity(cls, attachment: Attachment) -> AttachmentDTO:
        return cls(
            url=attachment.url,
            content_type=attachment.content_type,
            size=attachment.size,
            filename=attachment.filename,
        )


class MessageDTO(BaseModel):
    """DTO for message data returned to clients."""

    id: int
    sender: IdentityDTO
    text: Optional[str] = None
    attachment: Optional[AttachmentDTO] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, message: Message) -> MessageDTO:
        return cls(
            id=message.id.value,
            sender=IdentityDTO.from_entity(message.sender),
            text=message.text,
            attachment=(
                AttachmentDTO.from_entity(message.attachment)
                if message.attachment
                else None
            ),
            created_at=message.created_at,
        )
