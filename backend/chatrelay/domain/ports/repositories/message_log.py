"""
Message Log Port - Interface for durable, append-only message storage.
Implementations:
- chatrelay/infrastructure/persistence/prisma_message_log.py
- chatrelay/infrastructure/persistence/in_memory_message_log.py
- chatrelay/infrastructure/cache/cached_message_log.py (decorator)
"""

from abc import ABC, abstractmethod
from typing import Optional

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Attachment, Message


class MessageLog(ABC):
    @abstractmethod
    async def append(
        self,
        sender: Identity,
        text: Optional[str],
        attachment: Optional[Attachment] = None,
    ) -> Message:
        """Persist a message; the log assigns its id and timestamp.

        Raises:
            StorageError: LOG_UNAVAILABLE if the message could not be stored.
        """
        ...

    @abstractmethod
    async def recent(self, limit: int, offset: int = 0) -> list[Message]:
        """Page of the most recent messages, returned oldest-first.

        offset=0 is the newest page.
        """
        ...
