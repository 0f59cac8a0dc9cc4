"""
ConnectionId Value Object - identifies one live transport session.
"""

from __future__ import annotations
from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ConnectionId:
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("ConnectionId cannot be empty")
        UUID(self.value)

    @classmethod
    def new(cls) -> ConnectionId:
        return cls(str(uuid4()))

    def __str__(self) -> str:
        return self.value
