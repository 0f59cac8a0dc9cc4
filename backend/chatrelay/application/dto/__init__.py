"""
DTOs - Data Transfer Objects

DTOs for transferring data between layers:
- chat.py   → IdentityDTO, AttachmentDTO, MessageDTO
- events.py → WebSocket client and server events

Note: These are different from domain entities.
DTOs are for API input/output, entities are for business logic.
"""

from chatrelay.application.dto.chat import AttachmentDTO, IdentityDTO, MessageDTO

__all__ = [
    "IdentityDTO",
    "AttachmentDTO",
    "MessageDTO",
]
