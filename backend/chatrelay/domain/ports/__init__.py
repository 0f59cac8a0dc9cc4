"""
PORTS - Interfaces that infrastructure implements

A "port" is an abstract interface that defines WHAT the core needs,
without specifying HOW it's done.

- repositories/  → Credential store and message log
- blob_store.py  → Attachment storage
"""

from chatrelay.domain.ports.blob_store import BlobStore
from chatrelay.domain.ports.repositories import CredentialStore, MessageLog

__all__ = [
    "BlobStore",
    "CredentialStore",
    "MessageLog",
]
