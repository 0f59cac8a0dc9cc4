"""
Blob Store Port - Interface for binary object storage.
Implementation: chatrelay/infrastructure/storage/local_blob_store.py
"""

from abc import ABC, abstractmethod
from typing import Optional


class BlobStore(ABC):
    @abstractmethod
    async def store(
        self, data: bytes, content_type: str, filename: Optional[str] = None
    ) -> str:
        """Store a payload under a freshly generated key and return its URL.

        Never overwrites an existing object.

        Raises:
            StorageError: BLOB_UNAVAILABLE if the payload could not be stored.
        """
        ...
