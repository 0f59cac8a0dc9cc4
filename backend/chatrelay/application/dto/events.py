"""
WebSocket event schemas.

Client → server events are parsed with ``parse_client_event``; server → client
events are pydantic models serialized with ``model_dump(mode="json")``.

Client events:
    {"type": "authenticate", "token": "<jwt>"}
    {"type": "send_message", "text": "hi",
     "attachment": {"filename": "a.png", "content_type": "image/png", "data": "<base64>"},
     "client_ref": "optional id echoed back on rejection"}
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import Base64Bytes, BaseModel, Field, TypeAdapter

from chatrelay.application.dto.chat import IdentityDTO, MessageDTO


# ==================== CLIENT → SERVER ====================


class AttachmentUpload(BaseModel):
    filename: Optional[str] = Field(default=None, max_length=255)
    content_type: str = Field(default="application/octet-stream", min_length=1)
    data: Base64Bytes


class AuthenticateEvent(BaseModel):
    type: Literal["authenticate"] = "authenticate"
    token: str


class SendMessageEvent(BaseModel):
    type: Literal["send_message"] = "send_message"
    text: Optional[str] = None
    attachment: Optional[AttachmentUpload] = None
    client_ref: Optional[str] = Field(default=None, max_length=128)


ClientEvent = Annotated[
    Union[AuthenticateEvent, SendMessageEvent], Field(discriminator="type")
]

_client_event_adapter = TypeAdapter(ClientEvent)


def parse_client_event(payload: object) -> Union[AuthenticateEvent, SendMessageEvent]:
    """Validate a decoded JSON frame. Raises pydantic.ValidationError."""
    return _client_event_adapter.validate_python(payload)


# ==================== SERVER → CLIENT ====================


class AuthResultEvent(BaseModel):
    type: Literal["auth_result"] = "auth_result"
    success: bool
    reason: Optional[str] = None
    user: Optional[IdentityDTO] = None


class PresenceChangedEvent(BaseModel):
    type: Literal["presence_changed"] = "presence_changed"
    users: list[IdentityDTO]


class MessageDeliveredEvent(BaseModel):
    type: Literal["message_delivered"] = "message_delivered"
    seq: int
    message: MessageDTO


class SendRejectedEvent(BaseModel):
    type: Literal["send_rejected"] = "send_rejected"
    reason: str
    detail: str = ""
    client_ref: Optional[str] = None


class SessionSupersededEvent(BaseModel):
    """Sent to a connection whose identity was bound by a newer connection."""

    type: Literal["session_superseded"] = "session_superseded"


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    reason: str
    detail: str = ""


ServerEvent = Union[
    AuthResultEvent,
    PresenceChangedEvent,
    MessageDeliveredEvent,
    SendRejectedEvent,
    SessionSupersededEvent,
    ErrorEvent,
]
