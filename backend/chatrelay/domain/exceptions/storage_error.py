"""
StorageError - Raised when the blob store, message log or credential store
fails or times out.
Maps to: HTTP 503 Service Unavailable
"""

from enum import Enum


class StorageErrorKind(str, Enum):
    BLOB_UNAVAILABLE = "blob_unavailable"
    LOG_UNAVAILABLE = "log_unavailable"
    CREDENTIALS_UNAVAILABLE = "credentials_unavailable"
    TIMEOUT = "timeout"


class StorageError(Exception):
    """External storage failure. The core never retries."""

    def __init__(self, kind: StorageErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value
