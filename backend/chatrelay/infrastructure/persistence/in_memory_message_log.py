"""
In-memory Message Log - append-only list with sequential ids.
"""

from datetime import datetime, timezone
from typing import Optional

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Attachment, Message
from chatrelay.domain.ports.repositories.message_log import MessageLog
from chatrelay.domain.value_objects.message_id import MessageId


class InMemoryMessageLog(MessageLog):
    def __init__(self):
        self._messages: list[Message] = []

    async def append(
        self,
        sender: Identity,
        text: Optional[str],
        attachment: Optional[Attachment] = None,
    ) -> Message:
        message = Message(
            id=MessageId(len(self._messages) + 1),
            sender=sender,
            text=text,
            attachment=attachment,
            created_at=datetime.now(timezone.utc),
        )
        self._messages.append(message)
        return message

    async def recent(self, limit: int, offset: int = 0) -> list[Message]:
        if limit <= 0:
            return []
        end = len(self._messages) - max(offset, 0)
        if end <= 0:
            return []
        start = max(end - limit, 0)
        return list(self._messages[start:end])

    def __len__(self) -> int:
        return len(self._messages)
