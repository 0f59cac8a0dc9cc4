"""
In-memory Credential Store - process-local users for development and tests.

Hashing runs in a worker thread (asyncio.to_thread) so a slow scrypt round
never stalls the event loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.exceptions import AuthError, AuthErrorReason
from chatrelay.domain.ports.repositories.credential_store import CredentialStore
from chatrelay.domain.value_objects.user_id import UserId
from chatrelay.infrastructure.auth.passwords import check_secret, hash_secret

logger = logging.getLogger(__name__)


@dataclass
class _UserRecord:
    identity: Identity
    password_hash: str


class InMemoryCredentialStore(CredentialStore):
    def __init__(self):
        self._by_username: dict[str, _UserRecord] = {}
        self._by_id: dict[UserId, _UserRecord] = {}

    async def verify(self, identifier: str, secret: str) -> Identity:
        record = self._by_username.get(identifier)
        password_hash = record.password_hash if record else ""
        matches = await asyncio.to_thread(check_secret, password_hash, secret)
        if record is None or not matches:
            raise AuthError(AuthErrorReason.BAD_CREDENTIALS, "Invalid credentials.")
        return record.identity

    async def create(
        self, identifier: str, secret: str, display_name: Optional[str] = None
    ) -> Identity:
        if identifier in self._by_username:
            raise AuthError(AuthErrorReason.ALREADY_EXISTS, "Username already exists.")

        password_hash = await asyncio.to_thread(hash_secret, secret)

        # The name may have been taken while hashing
        if identifier in self._by_username:
            raise AuthError(AuthErrorReason.ALREADY_EXISTS, "Username already exists.")

        identity = Identity(
            id=UserId(str(uuid4())),
            username=identifier,
            display_name=display_name or identifier,
        )
        record = _UserRecord(identity=identity, password_hash=password_hash)
        self._by_username[identifier] = record
        self._by_id[identity.id] = record
        logger.debug(f"[MemoryCredentials] Created user {identifier}")
        return identity

    async def get(self, user_id: UserId) -> Optional[Identity]:
        record = self._by_id.get(user_id)
        return record.identity if record else None
