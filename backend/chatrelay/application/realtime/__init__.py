"""
Realtime core - presence registry, broadcast engine and connection lifecycle.
"""

from chatrelay.application.realtime.session import ConnectionSession
from chatrelay.application.realtime.presence_registry import (
    BindResult,
    PresenceRegistry,
)
from chatrelay.application.realtime.broadcast_engine import (
    AttachmentPayload,
    DeliveredMessage,
    MessageBroadcastEngine,
)
from chatrelay.application.realtime.connection_controller import (
    ConnectionLifecycleController,
)

__all__ = [
    "ConnectionSession",
    "BindResult",
    "PresenceRegistry",
    "AttachmentPayload",
    "DeliveredMessage",
    "MessageBroadcastEngine",
    "ConnectionLifecycleController",
]
