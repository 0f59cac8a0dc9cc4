"""
QUERIES - Read operations (CQRS)

Queries retrieve data without modifying state. Each query has:
- Query class: Parameters for the read
- Handler class: Executes the read

Subfolders:
- chat/     → get_recent_messages
- presence/ → get_online_users
"""

from chatrelay.application.queries.chat import (
    GetRecentMessagesQuery,
    GetRecentMessagesHandler,
)
from chatrelay.application.queries.presence import (
    GetOnlineUsersQuery,
    GetOnlineUsersHandler,
)

__all__ = [
    # chat
    "GetRecentMessagesQuery",
    "GetRecentMessagesHandler",
    # presence
    "GetOnlineUsersQuery",
    "GetOnlineUsersHandler",
]
