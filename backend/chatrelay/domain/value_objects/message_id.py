"""
MessageId Value Object - positive integer assigned by the message log.
"""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class MessageId:
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Message ID must be an integer")
        if self.value <= 0:
            raise ValueError("Message ID must be positive")

    def __str__(self) -> str:
        return str(self.value)
