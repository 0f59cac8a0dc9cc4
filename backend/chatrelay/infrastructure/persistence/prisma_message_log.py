"""
Prisma Message Log Implementation.

Prisma models (see prisma/schema.prisma):
    model Message {
        id                Int      @id @default(autoincrement())
        sender_id         String
        content           String?
        file_url          String?
        file_content_type String?
        file_size         Int?
        file_name         String?
        timestamp         DateTime @default(now())
        sender            User     @relation(...)
    }

Mapping:
- Prisma: id (int) ←→ Domain: id (MessageId)
- Prisma: sender (User, included) ←→ Domain: sender (Identity)
- Prisma: file_* columns ←→ Domain: attachment (Attachment | None)
- Prisma: content ←→ Domain: text

The database assigns both id and timestamp, so they are the canonical values.
"""

import logging
from typing import Any, Optional

from prisma import Prisma
from prisma.errors import PrismaError

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Attachment, Message
from chatrelay.domain.exceptions import StorageError, StorageErrorKind
from chatrelay.domain.ports.repositories.message_log import MessageLog
from chatrelay.domain.value_objects.message_id import MessageId
from chatrelay.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)


class PrismaMessageLog(MessageLog):
    """
    Prisma implementation of MessageLog.

    Persists Message entities to PostgreSQL via Prisma.
    """

    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        """
        Args:
            prisma: Connected Prisma client (injected by DI container)
        """
        self._prisma = prisma

    def _to_entity(self, record: Any) -> Message:
        attachment = None
        if record.file_url:
            attachment = Attachment(
                url=record.file_url,
                content_type=record.file_content_type or "application/octet-stream",
                size=record.file_size or 0,
                filename=record.file_name,
            )
        return Message(
            id=MessageId(record.id),
            sender=Identity(
                id=UserId(record.sender.id),
                username=record.sender.username,
                display_name=record.sender.display_name,
            ),
            text=record.content,
            attachment=attachment,
            created_at=record.timestamp,
        )

    async def append(
        self,
        sender: Identity,
        text: Optional[str],
        attachment: Optional[Attachment] = None,
    ) -> Message:
        data = {
            "sender_id": sender.id.value,
            "content": text,
        }
        if attachment is not None:
            data.update(
                {
                    "file_url": attachment.url,
                    "file_content_type": attachment.content_type,
                    "file_size": attachment.size,
                    "file_name": attachment.filename,
                }
            )

        try:
            record = await self._prisma.message.create(
                data=data, include={"sender": True}
            )
        except PrismaError as e:
            logger.error(f"[PrismaMessageLog] append failed: {e}")
            raise StorageError(StorageErrorKind.LOG_UNAVAILABLE, str(e)) from e
        return self._to_entity(record)

    async def recent(self, limit: int, offset: int = 0) -> list[Message]:
        """
        Newest `limit` messages after skipping `offset`, returned oldest first.
        """
        if limit <= 0:
            return []
        try:
            records = await self._prisma.message.find_many(
                order=[{"timestamp": "desc"}, {"id": "desc"}],
                take=limit,
                skip=max(offset, 0),
                include={"sender": True},
            )
        except PrismaError as e:
            logger.error(f"[PrismaMessageLog] recent failed: {e}")
            raise StorageError(StorageErrorKind.LOG_UNAVAILABLE, str(e)) from e
        records.reverse()  # Now oldest first
        return [self._to_entity(record) for record in records]
