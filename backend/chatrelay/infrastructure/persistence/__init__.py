"""
Persistence Layer - credential store and message log implementations.

The Prisma implementations need a generated client and are imported
directly from their modules (see chatrelay.setup.ioc.prisma_provider).
"""

from chatrelay.infrastructure.persistence.in_memory_credential_store import (
    InMemoryCredentialStore,
)
from chatrelay.infrastructure.persistence.in_memory_message_log import (
    InMemoryMessageLog,
)

__all__ = [
    "InMemoryCredentialStore",
    "InMemoryMessageLog",
]
