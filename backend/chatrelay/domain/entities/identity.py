"""
Identity Entity - A registered chat user as seen by the core.
"""

from dataclasses import dataclass
from chatrelay.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class Identity:
    id: UserId
    username: str
    display_name: str

    def __post_init__(self):
        if not self.username:
            raise ValueError("Identity must have a username.")
        if not self.display_name:
            raise ValueError("Identity must have a display name.")
