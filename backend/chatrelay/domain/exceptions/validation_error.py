"""
DomainValidationError - Raised when a business rule is violated.
Maps to: HTTP 400 Bad Request
"""

from enum import Enum


class ValidationCode(str, Enum):
    EMPTY_MESSAGE = "empty_message"
    MESSAGE_TOO_LONG = "message_too_long"
    ATTACHMENT_TOO_LARGE = "attachment_too_large"
    INVALID_EVENT = "invalid_event"


class DomainValidationError(Exception):
    """Exception raised for domain validation errors."""

    def __init__(self, code: ValidationCode, message: str = ""):
        super().__init__(message or code.value)
        self.code = code
        self.message = message or code.value
