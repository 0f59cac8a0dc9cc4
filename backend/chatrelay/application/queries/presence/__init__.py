"""Presence queries."""

from .get_online_users import GetOnlineUsersQuery, GetOnlineUsersHandler

__all__ = [
    "GetOnlineUsersQuery",
    "GetOnlineUsersHandler",
]
