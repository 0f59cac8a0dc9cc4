"""
REPOSITORY PORTS - Data persistence interfaces

Each repository port:
- Is an abstract base class (ABC)
- Defines methods the domain needs
- Does NOT specify implementation (Prisma, in-memory, etc.)

Infrastructure layer provides implementations.
"""

from chatrelay.domain.ports.repositories.credential_store import CredentialStore
from chatrelay.domain.ports.repositories.message_log import MessageLog

__all__ = [
    "CredentialStore",
    "MessageLog",
]
