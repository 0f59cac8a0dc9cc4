"""Chat history queries."""

from .get_recent_messages import GetRecentMessagesQuery, GetRecentMessagesHandler

__all__ = [
    "GetRecentMessagesQuery",
    "GetRecentMessagesHandler",
]
