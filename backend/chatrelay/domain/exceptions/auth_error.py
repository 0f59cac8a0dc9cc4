"""
AuthError - Raised when a caller cannot be authenticated.
Maps to: HTTP 401 (409 for ALREADY_EXISTS), or an auth_result / send_rejected
event on the offending connection.
"""

from enum import Enum


class AuthErrorReason(str, Enum):
    MALFORMED = "malformed"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    BAD_CREDENTIALS = "bad_credentials"
    NOT_AUTHENTICATED = "not_authenticated"
    ALREADY_EXISTS = "already_exists"
    UNKNOWN_IDENTITY = "unknown_identity"


class AuthError(Exception):
    """Authentication failure. Always recoverable."""

    def __init__(self, reason: AuthErrorReason, message: str = ""):
        super().__init__(message or reason.value)
        self.reason = reason
        self.message = message or reason.value
