"""
Connection Entity - One live bidirectional transport session.

State machine:

    CONNECTING -> UNAUTHENTICATED -> ACTIVE -> CLOSED
                        ^              |
                        +--- demote ---+

CLOSED is terminal and reachable from every other state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.exceptions.connection_closed import ConnectionClosedError
from chatrelay.domain.value_objects.connection_id import ConnectionId


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    UNAUTHENTICATED = "unauthenticated"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class Connection:
    id: ConnectionId
    state: ConnectionState = ConnectionState.CONNECTING
    identity: Optional[Identity] = None

    @property
    def is_active(self) -> bool:
        return self.state is ConnectionState.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.state is ConnectionState.CLOSED

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise ConnectionClosedError(f"Connection {self.id} is closed")

    def accept(self) -> None:
        self._ensure_open()
        if self.state is not ConnectionState.CONNECTING:
            raise ValueError(f"Cannot accept connection in state {self.state.value}")
        self.state = ConnectionState.UNAUTHENTICATED

    def activate(self, identity: Identity) -> None:
        """Bind an identity. Allowed again while ACTIVE (rebind)."""
        self._ensure_open()
        if self.state is ConnectionState.CONNECTING:
            raise ValueError("Cannot authenticate a connection before it is accepted")
        self.identity = identity
        self.state = ConnectionState.ACTIVE

    def demote(self) -> None:
        self._ensure_open()
        self.identity = None
        self.state = ConnectionState.UNAUTHENTICATED

    def close(self) -> bool:
        """Returns False if the connection was already closed."""
        if self.is_closed:
            return False
        self.identity = None
        self.state = ConnectionState.CLOSED
        return True
