"""
ConnectionSession - a Connection plus its outbound event queue.

The presence registry enqueues events on the outbox under its lock, which
fixes their order. A per-connection writer task drains the outbox to the
transport, so a slow socket never blocks the registry or other connections.
"""

import asyncio
import logging
from typing import Optional

from chatrelay.application.dto.events import ServerEvent
from chatrelay.config.settings import Config
from chatrelay.domain.entities.connection import Connection
from chatrelay.domain.value_objects.connection_id import ConnectionId

logger = logging.getLogger(__name__)

# WebSocket close codes
CLOSE_NORMAL = 1000
CLOSE_POLICY_VIOLATION = 1008
CLOSE_TRY_AGAIN_LATER = 1013


class ConnectionSession:
    def __init__(
        self,
        connection_id: Optional[ConnectionId] = None,
        outbox_size: int = Config.WS_OUTBOX_SIZE,
    ):
        self.connection = Connection(id=connection_id or ConnectionId.new())
        self._outbox: asyncio.Queue[Optional[ServerEvent]] = asyncio.Queue(
            maxsize=outbox_size
        )
        self._closing = False
        self.close_reason: Optional[str] = None
        self.close_code = CLOSE_NORMAL

    @property
    def id(self) -> ConnectionId:
        return self.connection.id

    @property
    def closing(self) -> bool:
        return self._closing

    def offer(self, event: ServerEvent) -> bool:
        """Queue an event without waiting. False if closing or the outbox is full."""
        if self._closing:
            return False
        try:
            self._outbox.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    async def next_event(self) -> Optional[ServerEvent]:
        """Next queued event, or None once the session has been asked to close."""
        return await self._outbox.get()

    def pending(self) -> int:
        return self._outbox.qsize()

    def request_close(
        self,
        reason: str,
        code: int = CLOSE_NORMAL,
        discard_pending: bool = False,
    ) -> None:
        """Ask the writer to close the transport after the queued events."""
        if self._closing:
            return
        self._closing = True
        self.close_reason = reason
        self.close_code = code
        if discard_pending:
            self._discard_pending()
        try:
            self._outbox.put_nowait(None)
        except asyncio.QueueFull:
            self._discard_pending()
            self._outbox.put_nowait(None)
        logger.debug(f"[Session] {self.id} closing: {reason}")

    def _discard_pending(self) -> None:
        while not self._outbox.empty():
            self._outbox.get_nowait()
