"""
DOMAIN EXCEPTIONS - Business rule violations

These exceptions are raised by domain logic and caught by presentation layer.
Presentation layer maps them to HTTP status codes or WebSocket events.
"""

from chatrelay.domain.exceptions.auth_error import AuthError, AuthErrorReason
from chatrelay.domain.exceptions.validation_error import (
    DomainValidationError,
    ValidationCode,
)
from chatrelay.domain.exceptions.storage_error import StorageError, StorageErrorKind
from chatrelay.domain.exceptions.connection_closed import ConnectionClosedError

__all__ = [
    "AuthError",
    "AuthErrorReason",
    "DomainValidationError",
    "ValidationCode",
    "StorageError",
    "StorageErrorKind",
    "ConnectionClosedError",
]
