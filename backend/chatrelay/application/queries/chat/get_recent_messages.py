"""
GetRecentMessages Query - page of chat history for a client catching up.

Maps from: GET /messages/history
"""

from dataclasses import dataclass

from chatrelay.application.common.interfaces import Query, QueryHandler
from chatrelay.config.settings import Config
from chatrelay.domain.entities.message import Message
from chatrelay.domain.ports.repositories import MessageLog


@dataclass(frozen=True)
class GetRecentMessagesQuery(Query[list[Message]]):
    limit: int = Config.HISTORY_DEFAULT_LIMIT
    offset: int = 0


class GetRecentMessagesHandler(QueryHandler[list[Message]]):
    def __init__(self, message_log: MessageLog, max_limit: int = Config.HISTORY_MAX_LIMIT):
        self._message_log = message_log
        self._max_limit = max_limit

    async def execute(self, query: GetRecentMessagesQuery) -> list[Message]:
        """
        Returns:
            Messages oldest first; offset 0 is the newest page.

        Raises:
            ValueError: negative paging values
        """
        if query.limit < 1 or query.offset < 0:
            raise ValueError("limit must be positive and offset non-negative.")
        limit = min(query.limit, self._max_limit)
        return await self._message_log.recent(limit, query.offset)
