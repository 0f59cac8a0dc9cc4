"""
Presence Registry - live connections, their bound identities, and the online set.

All mutations, snapshots and broadcast-order decisions go through one
asyncio.Lock. Nothing outside this class touches the underlying maps.

Rebind policy: the most recent authentication wins. When an identity binds a
new connection, the connection it was bound to before is demoted to
UNAUTHENTICATED (transport left open) and told with a session_superseded
event. After the newer connection goes away the older one does not regain
presence unless it authenticates again.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from chatrelay.application.dto.chat import IdentityDTO, MessageDTO
from chatrelay.application.dto.events import (
    MessageDeliveredEvent,
    PresenceChangedEvent,
    ServerEvent,
    SessionSupersededEvent,
)
from chatrelay.application.realtime.session import (
    CLOSE_TRY_AGAIN_LATER,
    ConnectionSession,
)
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Message
from chatrelay.domain.exceptions import (
    AuthError,
    AuthErrorReason,
    ConnectionClosedError,
)
from chatrelay.domain.value_objects.connection_id import ConnectionId
from chatrelay.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BindResult:
    identity: Identity
    displaced: Optional[ConnectionId] = None  # connection demoted by this bind
    rebind: bool = False  # connection was already active


def sorted_identities(identities) -> list[Identity]:
    return sorted(identities, key=lambda i: (i.display_name.casefold(), i.id.value))


class PresenceRegistry:
    def __init__(self):
        self._lock = asyncio.Lock()
        self._sessions: dict[ConnectionId, ConnectionSession] = {}
        self._owners: dict[UserId, ConnectionId] = {}
        self._last_seq = 0

    # ==================== LIFECYCLE ====================

    async def register(self, session: ConnectionSession) -> None:
        """Admit a freshly accepted transport as UNAUTHENTICATED."""
        async with self._lock:
            if session.id in self._sessions:
                raise ValueError(f"Connection {session.id} is already registered")
            session.connection.accept()
            self._sessions[session.id] = session
        logger.debug(f"[Presence] Registered connection {session.id}")

    async def bind(self, connection_id: ConnectionId, identity: Identity) -> BindResult:
        """
        Bind a connection to an identity and make it ACTIVE.

        Raises:
            ConnectionClosedError: connection already closed or never registered
        """
        async with self._lock:
            session = self._sessions.get(connection_id)
            if session is None or session.connection.is_closed:
                raise ConnectionClosedError(
                    f"Cannot bind closed connection {connection_id}"
                )

            connection = session.connection
            rebind = connection.is_active

            # Same connection switching to another identity releases the old one
            previous = connection.identity
            if previous is not None and previous.id != identity.id:
                if self._owners.get(previous.id) == connection_id:
                    del self._owners[previous.id]

            displaced = None
            owner_id = self._owners.get(identity.id)
            if owner_id is not None and owner_id != connection_id:
                owner = self._sessions.get(owner_id)
                if owner is not None and not owner.connection.is_closed:
                    owner.connection.demote()
                    self._offer(owner, SessionSupersededEvent())
                    displaced = owner_id

            connection.activate(identity)
            self._owners[identity.id] = connection_id

        if displaced is not None:
            logger.info(
                f"[Presence] {identity.username} moved from {displaced} to {connection_id}"
            )
        return BindResult(identity=identity, displaced=displaced, rebind=rebind)

    async def unbind(self, connection_id: ConnectionId) -> bool:
        """
        Remove a connection for good. Idempotent.

        Returns:
            True if the connection was ACTIVE, i.e. the online set changed.
        """
        async with self._lock:
            session = self._sessions.pop(connection_id, None)
            if session is None:
                return False

            connection = session.connection
            identity = connection.identity
            was_active = connection.is_active
            connection.close()
            if identity is not None and self._owners.get(identity.id) == connection_id:
                del self._owners[identity.id]

        logger.debug(
            f"[Presence] Unbound connection {connection_id} (was_active={was_active})"
        )
        return was_active

    # ==================== QUERIES ====================

    async def snapshot(self) -> frozenset[Identity]:
        """Point-in-time online set."""
        async with self._lock:
            return self._online()

    async def require_active(self, connection_id: ConnectionId) -> Identity:
        """
        Identity bound to an ACTIVE connection.

        Raises:
            AuthError(NOT_AUTHENTICATED): unknown, closed or unauthenticated connection
        """
        async with self._lock:
            session = self._sessions.get(connection_id)
            if session is None or not session.connection.is_active:
                raise AuthError(
                    AuthErrorReason.NOT_AUTHENTICATED,
                    "You need to authenticate before sending messages.",
                )
            return session.connection.identity

    def is_registered(self, connection_id: ConnectionId) -> bool:
        return connection_id in self._sessions

    def is_active(self, connection_id: ConnectionId) -> bool:
        session = self._sessions.get(connection_id)
        return session is not None and session.connection.is_active

    @property
    def connection_count(self) -> int:
        return len(self._sessions)

    # ==================== DELIVERY ====================

    def unicast(self, connection_id: ConnectionId, event: ServerEvent) -> bool:
        """Queue an event for one connection, whatever its state."""
        session = self._sessions.get(connection_id)
        if session is None:
            return False
        return self._offer(session, event)

    def request_close(
        self, connection_id: ConnectionId, reason: str, code: int
    ) -> None:
        session = self._sessions.get(connection_id)
        if session is not None:
            session.request_close(reason, code=code)

    async def broadcast_presence(self) -> list[Identity]:
        """Send the current online set to every ACTIVE connection."""
        async with self._lock:
            users = sorted_identities(self._online())
            event = PresenceChangedEvent(
                users=[IdentityDTO.from_entity(identity) for identity in users]
            )
            for session in self._active_sessions():
                self._offer(session, event)
        return users

    async def broadcast_message(self, message: Message) -> int:
        """
        Assign the message its place in the global order and queue it on
        every ACTIVE connection, the sender's included.

        Returns:
            The broadcast sequence number.
        """
        dto = MessageDTO.from_entity(message)
        async with self._lock:
            self._last_seq += 1
            seq = self._last_seq
            event = MessageDeliveredEvent(seq=seq, message=dto)
            recipients = 0
            for session in self._active_sessions():
                if self._offer(session, event):
                    recipients += 1
        logger.debug(
            f"[Presence] Message {message.id} queued as seq={seq} for {recipients} connection(s)"
        )
        return seq

    # ==================== INTERNALS (lock held) ====================

    def _active_sessions(self) -> list[ConnectionSession]:
        return [s for s in self._sessions.values() if s.connection.is_active]

    def _online(self) -> frozenset[Identity]:
        return frozenset(s.connection.identity for s in self._active_sessions())

    def _offer(self, session: ConnectionSession, event: ServerEvent) -> bool:
        if session.offer(event):
            return True
        if not session.closing:
            logger.warning(
                f"[Presence] Outbox full for connection {session.id}, closing slow consumer"
            )
            session.request_close(
                "slow_consumer", code=CLOSE_TRY_AGAIN_LATER, discard_pending=True
            )
        return False
