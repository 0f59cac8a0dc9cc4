"""
Dishka DI Container Setup.

- ChatProvider: realtime core (APP singletons) and CQRS handlers (per request)
- InMemoryStoreProvider / PrismaStoreProvider: credential store and message log,
  chosen by Config.CHAT_STORE_BACKEND

Scope.APP = created once and shared by every request and WebSocket.
Scope.REQUEST = new instance per HTTP request.

Flow:
  Container → provides → ConnectionLifecycleController → to → /ws route
                                  ↓
               uses PresenceRegistry, MessageBroadcastEngine,
               SessionTokenCodec, CredentialStore
"""

import logging

from dishka import AsyncContainer, Provider, Scope, make_async_container, provide

from chatrelay.application.commands.auth import LoginUserHandler, RegisterUserHandler
from chatrelay.application.queries.chat import GetRecentMessagesHandler
from chatrelay.application.queries.presence import GetOnlineUsersHandler
from chatrelay.application.realtime import (
    ConnectionLifecycleController,
    MessageBroadcastEngine,
    PresenceRegistry,
)
from chatrelay.config.settings import Config
from chatrelay.domain.ports import BlobStore, CredentialStore, MessageLog
from chatrelay.infrastructure.persistence import (
    InMemoryCredentialStore,
    InMemoryMessageLog,
)
from chatrelay.infrastructure.storage import LocalBlobStore
from chatrelay.services.session_token_codec import SessionTokenCodec

logger = logging.getLogger(__name__)


class ChatProvider(Provider):
    """
    Application dependency provider.

    Store ports (CredentialStore, MessageLog) come from a store provider.
    """

    # ==================== SERVICES ====================

    @provide(scope=Scope.APP)
    def get_token_codec(self) -> SessionTokenCodec:
        return SessionTokenCodec(
            secret=Config.SESSION_TOKEN_SECRET,
            issuer=Config.SESSION_TOKEN_ISSUER,
            audience=Config.SESSION_TOKEN_AUDIENCE,
            ttl_seconds=Config.SESSION_TOKEN_TTL_SECONDS,
        )

    @provide(scope=Scope.APP)
    def get_blob_store(self) -> BlobStore:
        return LocalBlobStore(
            base_dir=Config.BLOB_STORAGE_DIR,
            public_path=Config.BLOB_PUBLIC_PATH,
            public_base_url=Config.BLOB_PUBLIC_BASE_URL,
        )

    # ==================== REALTIME CORE ====================

    @provide(scope=Scope.APP)
    def get_presence_registry(self) -> PresenceRegistry:
        """One registry per process; it holds all live connections."""
        return PresenceRegistry()

    @provide(scope=Scope.APP)
    def get_broadcast_engine(
        self,
        registry: PresenceRegistry,
        message_log: MessageLog,
        blob_store: BlobStore,
    ) -> MessageBroadcastEngine:
        return MessageBroadcastEngine(
            registry=registry,
            message_log=message_log,
            blob_store=blob_store,
            storage_timeout=Config.STORAGE_TIMEOUT_SECONDS,
            max_text_chars=Config.MESSAGE_MAX_CHARS,
            max_attachment_bytes=Config.MAX_ATTACHMENT_BYTES,
        )

    @provide(scope=Scope.APP)
    def get_connection_controller(
        self,
        registry: PresenceRegistry,
        engine: MessageBroadcastEngine,
        token_codec: SessionTokenCodec,
        credential_store: CredentialStore,
    ) -> ConnectionLifecycleController:
        return ConnectionLifecycleController(
            registry=registry,
            engine=engine,
            token_codec=token_codec,
            credential_store=credential_store,
            close_on_auth_failure=Config.WS_CLOSE_ON_AUTH_FAILURE,
        )

    # ==================== HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_register_user_handler(
        self, credential_store: CredentialStore
    ) -> RegisterUserHandler:
        return RegisterUserHandler(credential_store)

    @provide(scope=Scope.REQUEST)
    def get_login_user_handler(
        self, credential_store: CredentialStore, token_codec: SessionTokenCodec
    ) -> LoginUserHandler:
        return LoginUserHandler(credential_store, token_codec)

    @provide(scope=Scope.REQUEST)
    def get_recent_messages_handler(
        self, message_log: MessageLog
    ) -> GetRecentMessagesHandler:
        return GetRecentMessagesHandler(message_log, max_limit=Config.HISTORY_MAX_LIMIT)

    @provide(scope=Scope.REQUEST)
    def get_online_users_handler(
        self, registry: PresenceRegistry
    ) -> GetOnlineUsersHandler:
        return GetOnlineUsersHandler(registry)


class InMemoryStoreProvider(Provider):
    """Process-local stores for tests and local runs without a database."""

    @provide(scope=Scope.APP)
    def get_credential_store(self) -> CredentialStore:
        return InMemoryCredentialStore()

    @provide(scope=Scope.APP)
    def get_message_log(self) -> MessageLog:
        return InMemoryMessageLog()


def get_store_provider(backend: str = "") -> Provider:
    backend = (backend or Config.CHAT_STORE_BACKEND).lower()
    if backend == "memory":
        return InMemoryStoreProvider()
    if backend == "prisma":
        # Needs a generated Prisma client, so only imported when selected
        from chatrelay.setup.ioc.prisma_provider import PrismaStoreProvider

        return PrismaStoreProvider()
    raise ValueError(f"Unknown CHAT_STORE_BACKEND: {backend!r}")


def create_container(*extra_providers: Provider, backend: str = "") -> AsyncContainer:
    """
    Create and configure the DI container.

    - make_async_container() creates the container with all providers
    - Call this ONCE at app startup; extra providers override earlier ones
    """
    store_provider = get_store_provider(backend)
    logger.info(f"[IoC] Using {type(store_provider).__name__}")
    return make_async_container(ChatProvider(), store_provider, *extra_providers)
