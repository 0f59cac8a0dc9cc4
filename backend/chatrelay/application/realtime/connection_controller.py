"""
Connection Lifecycle Controller - drives each connection through

    CONNECTING → UNAUTHENTICATED → ACTIVE → CLOSED

and turns client events into registry/engine calls. One connection's events
are handled one at a time by its reader loop; failures are reported to that
connection only.

Transport boundary:
    in:  on_connect(session), on_client_event(id, event), on_disconnect(id)
    out: auth_result, presence_changed, message_delivered, send_rejected,
         session_superseded, error
"""

import logging
from typing import Union

from pydantic import ValidationError

from chatrelay.application.dto.chat import IdentityDTO
from chatrelay.application.dto.events import (
    AuthenticateEvent,
    AuthResultEvent,
    ErrorEvent,
    SendMessageEvent,
    SendRejectedEvent,
    parse_client_event,
)
from chatrelay.application.realtime.broadcast_engine import (
    AttachmentPayload,
    MessageBroadcastEngine,
)
from chatrelay.application.realtime.presence_registry import PresenceRegistry
from chatrelay.application.realtime.session import (
    CLOSE_POLICY_VIOLATION,
    ConnectionSession,
)
from chatrelay.config.settings import Config
from chatrelay.domain.exceptions import (
    AuthError,
    AuthErrorReason,
    ConnectionClosedError,
    DomainValidationError,
    StorageError,
    ValidationCode,
)
from chatrelay.domain.ports.repositories.credential_store import CredentialStore
from chatrelay.domain.value_objects.connection_id import ConnectionId
from chatrelay.services.session_token_codec import SessionTokenCodec

logger = logging.getLogger(__name__)

ClientEvent = Union[AuthenticateEvent, SendMessageEvent]


class ConnectionLifecycleController:
    def __init__(
        self,
        registry: PresenceRegistry,
        engine: MessageBroadcastEngine,
        token_codec: SessionTokenCodec,
        credential_store: CredentialStore,
        close_on_auth_failure: bool = Config.WS_CLOSE_ON_AUTH_FAILURE,
    ):
        self._registry = registry
        self._engine = engine
        self._token_codec = token_codec
        self._credential_store = credential_store
        self._close_on_auth_failure = close_on_auth_failure

    async def on_connect(self, session: ConnectionSession) -> None:
        await self._registry.register(session)
        logger.info(f"[Lifecycle] Connection opened: {session.id}")

    async def on_disconnect(self, connection_id: ConnectionId) -> None:
        """Unbind the connection; safe to call more than once."""
        was_active = await self._registry.unbind(connection_id)
        if was_active:
            await self._registry.broadcast_presence()
        logger.info(
            f"[Lifecycle] Connection closed: {connection_id} (was_active={was_active})"
        )

    def on_malformed_frame(self, connection_id: ConnectionId, detail: str) -> None:
        """Frame that is not a JSON object; the connection stays open."""
        self._registry.unicast(
            connection_id,
            ErrorEvent(reason=ValidationCode.INVALID_EVENT.value, detail=detail),
        )

    async def on_raw_event(self, connection_id: ConnectionId, payload: object) -> None:
        """Validate a decoded frame and dispatch it."""
        try:
            event = parse_client_event(payload)
        except ValidationError as e:
            logger.info(f"[Lifecycle] Invalid event from {connection_id}: {e.error_count()} error(s)")
            self.on_malformed_frame(connection_id, _summarize(e))
            return
        await self.on_client_event(connection_id, event)

    async def on_client_event(self, connection_id: ConnectionId, event: ClientEvent) -> None:
        try:
            if isinstance(event, AuthenticateEvent):
                await self._authenticate(connection_id, event)
            elif isinstance(event, SendMessageEvent):
                await self._send(connection_id, event)
            else:
                raise TypeError(f"Unsupported event: {type(event).__name__}")
        except ConnectionClosedError:
            logger.debug(f"[Lifecycle] Dropped event for closed connection {connection_id}")
        except Exception as e:
            logger.exception(
                f"[Lifecycle] Unexpected error handling {type(event).__name__} "
                f"from {connection_id}: {e}"
            )
            self._registry.unicast(
                connection_id,
                ErrorEvent(reason="internal_error", detail="Unexpected server error."),
            )

    # ==================== HANDLERS ====================

    async def _authenticate(self, connection_id: ConnectionId, event: AuthenticateEvent) -> None:
        try:
            user_id = self._token_codec.verify(event.token)
            identity = await self._credential_store.get(user_id)
            if identity is None:
                raise AuthError(
                    AuthErrorReason.UNKNOWN_IDENTITY, f"User {user_id} not found."
                )
        except AuthError as e:
            logger.info(
                f"[Lifecycle] Authentication failed on {connection_id}: {e.reason.value}"
            )
            self._registry.unicast(
                connection_id, AuthResultEvent(success=False, reason=e.reason.value)
            )
            if self._close_on_auth_failure:
                self._registry.request_close(
                    connection_id, "auth_failed", CLOSE_POLICY_VIOLATION
                )
            return
        except StorageError as e:
            # Not the client's fault; the socket stays open so it can retry
            logger.warning(
                f"[Lifecycle] Credential lookup failed on {connection_id}: {e.kind.value}"
            )
            self._registry.unicast(
                connection_id, AuthResultEvent(success=False, reason=e.kind.value)
            )
            return

        result = await self._registry.bind(connection_id, identity)
        self._registry.unicast(
            connection_id,
            AuthResultEvent(success=True, user=IdentityDTO.from_entity(identity)),
        )
        await self._registry.broadcast_presence()
        logger.info(
            f"[Lifecycle] {identity.username} authenticated on {connection_id}"
            f"{' (rebind)' if result.rebind else ''}"
        )

    async def _send(self, connection_id: ConnectionId, event: SendMessageEvent) -> None:
        if not self._registry.is_active(connection_id):
            self._reject(
                connection_id,
                event,
                AuthErrorReason.NOT_AUTHENTICATED.value,
                "You need to authenticate before sending messages.",
            )
            return

        attachment = None
        if event.attachment is not None:
            attachment = AttachmentPayload(
                data=event.attachment.data,
                content_type=event.attachment.content_type,
                filename=event.attachment.filename,
            )

        try:
            await self._engine.send(connection_id, event.text, attachment)
        except AuthError as e:
            self._reject(connection_id, event, e.reason.value, e.message)
        except DomainValidationError as e:
            self._reject(connection_id, event, e.code.value, e.message)
        except StorageError as e:
            logger.warning(
                f"[Lifecycle] Send from {connection_id} failed: {e.kind.value}"
            )
            self._reject(
                connection_id, event, e.kind.value, "Could not send the message. Try again."
            )

    def _reject(
        self, connection_id: ConnectionId, event: SendMessageEvent, reason: str, detail: str
    ) -> None:
        self._registry.unicast(
            connection_id,
            SendRejectedEvent(reason=reason, detail=detail, client_ref=event.client_ref),
        )


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors()[:3]:
        location = ".".join(str(p) for p in item.get("loc", ())) or "event"
        parts.append(f"{location}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)
