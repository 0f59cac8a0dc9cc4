"""
Credential Store Port - Interface for user credentials and identities.
Implementations:
- chatrelay/infrastructure/persistence/prisma_credential_store.py
- chatrelay/infrastructure/persistence/in_memory_credential_store.py
"""

from abc import ABC, abstractmethod
from typing import Optional

from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.value_objects.user_id import UserId


class CredentialStore(ABC):
    @abstractmethod
    async def verify(self, identifier: str, secret: str) -> Identity:
        """Raises AuthError(BAD_CREDENTIALS) on unknown user or wrong secret."""
        ...

    @abstractmethod
    async def create(
        self, identifier: str, secret: str, display_name: Optional[str] = None
    ) -> Identity:
        """Raises AuthError(ALREADY_EXISTS) if the identifier is taken."""
        ...

    @abstractmethod
    async def get(self, user_id: UserId) -> Optional[Identity]: ...
