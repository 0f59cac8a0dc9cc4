"""
Message Broadcast Engine - validate, store, persist, then fan out.

Flow:
  send() → registry.require_active → BlobStore.store (optional)
         → MessageLog.append → registry.broadcast_message

Either the message is persisted and offered to every ACTIVE connection, or
send() raises and nothing is delivered. Blob and log calls run outside the
registry lock and are bounded by a timeout.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from chatrelay.application.realtime.presence_registry import PresenceRegistry
from chatrelay.config.settings import Config
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Attachment, Message
from chatrelay.domain.exceptions import (
    DomainValidationError,
    StorageError,
    StorageErrorKind,
    ValidationCode,
)
from chatrelay.domain.ports.blob_store import BlobStore
from chatrelay.domain.ports.repositories.message_log import MessageLog
from chatrelay.domain.value_objects.connection_id import ConnectionId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachmentPayload:
    data: bytes
    content_type: str = "application/octet-stream"
    filename: Optional[str] = None


@dataclass(frozen=True)
class DeliveredMessage:
    message: Message
    seq: int


class MessageBroadcastEngine:
    def __init__(
        self,
        registry: PresenceRegistry,
        message_log: MessageLog,
        blob_store: BlobStore,
        storage_timeout: float = Config.STORAGE_TIMEOUT_SECONDS,
        max_text_chars: int = Config.MESSAGE_MAX_CHARS,
        max_attachment_bytes: int = Config.MAX_ATTACHMENT_BYTES,
    ):
        self._registry = registry
        self._message_log = message_log
        self._blob_store = blob_store
        self._storage_timeout = storage_timeout
        self._max_text_chars = max_text_chars
        self._max_attachment_bytes = max_attachment_bytes

    async def send(
        self,
        connection_id: ConnectionId,
        text: Optional[str] = None,
        attachment: Optional[AttachmentPayload] = None,
    ) -> DeliveredMessage:
        """
        Persist and broadcast one message from an ACTIVE connection.

        Raises:
            AuthError: NOT_AUTHENTICATED if the connection is not ACTIVE
            DomainValidationError: empty message, text too long, attachment too large
            StorageError: blob store or message log failed or timed out
        """
        sender = await self._registry.require_active(connection_id)

        text = self._normalize_text(text)
        if attachment is not None and not attachment.data:
            attachment = None
        if text is None and attachment is None:
            raise DomainValidationError(
                ValidationCode.EMPTY_MESSAGE, "Message needs text or an attachment."
            )
        if attachment is not None and len(attachment.data) > self._max_attachment_bytes:
            raise DomainValidationError(
                ValidationCode.ATTACHMENT_TOO_LARGE,
                f"Attachment exceeds {self._max_attachment_bytes} bytes.",
            )

        stored_attachment = None
        if attachment is not None:
            stored_attachment = await self._store_attachment(attachment)

        message = await self._persist(sender, text, stored_attachment)
        seq = await self._registry.broadcast_message(message)

        logger.info(
            f"[Broadcast] seq={seq} message={message.id} from {sender.username}"
            f"{' with attachment' if stored_attachment else ''}"
        )
        return DeliveredMessage(message=message, seq=seq)

    def _normalize_text(self, text: Optional[str]) -> Optional[str]:
        if text is None:
            return None
        text = text.strip()
        if not text:
            return None
        if len(text) > self._max_text_chars:
            raise DomainValidationError(
                ValidationCode.MESSAGE_TOO_LONG,
                f"Message exceeds {self._max_text_chars} characters.",
            )
        return text

    async def _store_attachment(self, payload: AttachmentPayload) -> Attachment:
        try:
            url = await asyncio.wait_for(
                self._blob_store.store(
                    payload.data, payload.content_type, payload.filename
                ),
                timeout=self._storage_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("[Broadcast] Blob store timed out")
            raise StorageError(StorageErrorKind.TIMEOUT, "Attachment upload timed out.")
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"[Broadcast] Blob store failed: {e}")
            raise StorageError(StorageErrorKind.BLOB_UNAVAILABLE, str(e)) from e

        return Attachment(
            url=url,
            content_type=payload.content_type,
            size=len(payload.data),
            filename=payload.filename,
        )

    async def _persist(
        self,
        sender: Identity,
        text: Optional[str],
        attachment: Optional[Attachment],
    ) -> Message:
        try:
            return await asyncio.wait_for(
                self._message_log.append(sender, text, attachment),
                timeout=self._storage_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("[Broadcast] Message log timed out")
            raise StorageError(StorageErrorKind.TIMEOUT, "Saving the message timed out.")
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"[Broadcast] Message log failed: {e}")
            raise StorageError(StorageErrorKind.LOG_UNAVAILABLE, str(e)) from e
