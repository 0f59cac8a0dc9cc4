"""
Prisma Credential Store Implementation.

Prisma model (see prisma/schema.prisma):
    model User {
        id            String   @id @default(uuid())
        username      String   @unique
        display_name  String
        password_hash String
        created_at    DateTime @default(now())
    }

Database failures surface as StorageError(CREDENTIALS_UNAVAILABLE), so a
database outage reads as 503 rather than a bad password or a 500.
"""

import asyncio
import logging
from typing import Any, Optional

from prisma import Prisma
from prisma.errors import PrismaError, UniqueViolationError

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.exceptions import (
    AuthError,
    AuthErrorReason,
    StorageError,
    StorageErrorKind,
)
from chatrelay.domain.ports.repositories.credential_store import CredentialStore
from chatrelay.domain.value_objects.user_id import UserId
from chatrelay.infrastructure.auth.passwords import check_secret, hash_secret

logger = logging.getLogger(__name__)


class PrismaCredentialStore(CredentialStore):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: Any) -> Identity:
        return Identity(
            id=UserId(record.id),
            username=record.username,
            display_name=record.display_name,
        )

    def _unavailable(self, operation: str, error: PrismaError) -> StorageError:
        logger.error(f"[PrismaCredentials] {operation} failed: {error}")
        return StorageError(StorageErrorKind.CREDENTIALS_UNAVAILABLE, str(error))

    async def verify(self, identifier: str, secret: str) -> Identity:
        try:
            record = await self._prisma.user.find_unique(where={"username": identifier})
        except PrismaError as e:
            raise self._unavailable("verify", e) from e

        password_hash = record.password_hash if record else ""
        matches = await asyncio.to_thread(check_secret, password_hash, secret)
        if record is None or not matches:
            raise AuthError(AuthErrorReason.BAD_CREDENTIALS, "Invalid credentials.")
        return self._to_entity(record)

    async def create(
        self, identifier: str, secret: str, display_name: Optional[str] = None
    ) -> Identity:
        password_hash = await asyncio.to_thread(hash_secret, secret)
        try:
            record = await self._prisma.user.create(
                data={
                    "username": identifier,
                    "display_name": display_name or identifier,
                    "password_hash": password_hash,
                }
            )
        except UniqueViolationError:
            raise AuthError(AuthErrorReason.ALREADY_EXISTS, "Username already exists.")
        except PrismaError as e:
            raise self._unavailable("create", e) from e
        logger.info(f"[PrismaCredentials] Registered user {identifier}")
        return self._to_entity(record)

    async def get(self, user_id: UserId) -> Optional[Identity]:
        try:
            record = await self._prisma.user.find_unique(where={"id": user_id.value})
        except PrismaError as e:
            raise self._unavailable("get", e) from e
        return self._to_entity(record) if record else None
