"""
Storage Layer - blob storage implementations.
"""

from chatrelay.infrastructure.storage.local_blob_store import LocalBlobStore

__all__ = ["LocalBlobStore"]
