"""
Prisma-backed store provider (PostgreSQL), with the optional Redis history cache.
"""

import logging
from typing import AsyncIterable

from dishka import Provider, Scope, provide
from prisma import Prisma
from redis.exceptions import RedisError

from chatrelay.config.settings import Config
from chatrelay.domain.ports import CredentialStore, MessageLog
from chatrelay.infrastructure.cache import (
    CachedMessageLog,
    close_redis_client,
    create_redis_client,
)
from chatrelay.infrastructure.persistence.prisma_credential_store import (
    PrismaCredentialStore,
)
from chatrelay.infrastructure.persistence.prisma_message_log import PrismaMessageLog

logger = logging.getLogger(__name__)


class PrismaStoreProvider(Provider):
    # ==================== DATABASE ====================

    @provide(scope=Scope.APP)
    async def get_prisma(self) -> AsyncIterable[Prisma]:
        """
        Provide Prisma client (singleton, app-scoped).

        - connected on first use, disconnected when the container closes
        """
        prisma = Prisma()
        await prisma.connect()
        logger.info("[Prisma] Connected")
        yield prisma
        await prisma.disconnect()
        logger.info("[Prisma] Disconnected")

    # ==================== STORES ====================

    @provide(scope=Scope.APP)
    def get_credential_store(self, prisma: Prisma) -> CredentialStore:
        return PrismaCredentialStore(prisma)

    @provide(scope=Scope.APP)
    async def get_message_log(self, prisma: Prisma) -> AsyncIterable[MessageLog]:
        """
        PrismaMessageLog, wrapped in CachedMessageLog when REDIS_URL is set
        and Redis answers.
        """
        log = PrismaMessageLog(prisma)
        if not Config.REDIS_URL:
            yield log
            return

        try:
            redis = await create_redis_client(Config.REDIS_URL)
        except (RedisError, OSError) as e:
            logger.warning(f"[Redis] Unavailable, history cache disabled: {e}")
            yield log
            return

        try:
            yield CachedMessageLog(
                log,
                redis,
                cache_limit=Config.REDIS_CACHE_LIMIT,
                ttl=Config.REDIS_CACHE_TTL,
            )
        finally:
            await close_redis_client(redis)
