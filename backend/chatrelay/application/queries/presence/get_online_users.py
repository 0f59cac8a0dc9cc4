"""
GetOnlineUsers Query - current online set for REST clients.

Maps from: GET /presence/online
"""

from dataclasses import dataclass

from chatrelay.application.common.interfaces import Query, QueryHandler
from chatrelay.application.realtime.presence_registry import (
    PresenceRegistry,
    sorted_identities,
)
from chatrelay.domain.entities.identity import Identity


@dataclass(frozen=True)
class GetOnlineUsersQuery(Query[list[Identity]]):
    pass


class GetOnlineUsersHandler(QueryHandler[list[Identity]]):
    def __init__(self, registry: PresenceRegistry):
        self._registry = registry

    async def execute(self, query: GetOnlineUsersQuery) -> list[Identity]:
        return sorted_identities(await self._registry.snapshot())
