"""
Cached Message Log - Decorator pattern for Redis caching of recent history.

Architecture:
    CachedMessageLog (decorator)
        ↓ wraps
    PrismaMessageLog (concrete implementation)
        ↓ implements
    MessageLog (abstract interface)

Redis Data Structure (LIST):
- Key: "chat:messages:recent"
- Each element: JSON string for ONE message
- Order: Position 0 = newest, Position N = oldest
- TTL: Config.REDIS_CACHE_TTL
- Limit: Config.REDIS_CACHE_LIMIT

Cache Strategy:
- Read-Through: serve a page from the list only if it is fully present,
  otherwise read the log and repopulate the newest REDIS_CACHE_LIMIT entries.
- Write-Through: append to the log first, then LPUSHX (only extends a list
  that already exists, so a cold cache never holds a partial head).
- A miss repopulates only if no append started or finished while the log was
  read; otherwise the list stays cold (an append that saw no list pushed
  nothing, so the stale head would hide it). An append landing during the
  repopulate drops the list again.
- Cache failures never fail the operation; they are logged and the log is used.
"""

import json
import logging
from datetime import datetime
from typing import Optional

from redis.asyncio import Redis

from chatrelay.config.settings import Config
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.entities.message import Attachment, Message
from chatrelay.domain.ports.repositories.message_log import MessageLog
from chatrelay.domain.value_objects.message_id import MessageId
from chatrelay.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)

CACHE_KEY = "chat:messages:recent"


class CachedMessageLog(MessageLog):
    """
    Decorator: adds Redis caching to MessageLog.recent().
    """

    def __init__(
        self,
        log: MessageLog,
        redis: Redis,
        cache_limit: int = Config.REDIS_CACHE_LIMIT,
        ttl: int = Config.REDIS_CACHE_TTL,
    ):
        self._log = log
        self._redis = redis
        self._cache_limit = cache_limit
        self._ttl = ttl
        # Appends not yet finished, and appends finished so far (this process)
        self._appends_in_flight = 0
        self._append_generation = 0

    def _serialize_message(self, message: Message) -> str:
        attachment = None
        if message.attachment is not None:
            attachment = {
                "url": message.attachment.url,
                "content_type": message.attachment.content_type,
                "size": message.attachment.size,
                "filename": message.attachment.filename,
            }
        return json.dumps(
            {
                "id": message.id.value,
                "sender": {
                    "id": message.sender.id.value,
                    "username": message.sender.username,
                    "display_name": message.sender.display_name,
                },
                "text": message.text,
                "attachment": attachment,
                "created_at": message.created_at.isoformat(),
            }
        )

    def _deserialize_message(self, json_str: str) -> Message:
        d = json.loads(json_str)
        attachment = None
        if d.get("attachment"):
            a = d["attachment"]
            attachment = Attachment(
                url=a["url"],
                content_type=a["content_type"],
                size=a["size"],
                filename=a.get("filename"),
            )
        sender = d["sender"]
        return Message(
            id=MessageId(d["id"]),
            sender=Identity(
                id=UserId(sender["id"]),
                username=sender["username"],
                display_name=sender["display_name"],
            ),
            text=d.get("text"),
            attachment=attachment,
            created_at=datetime.fromisoformat(d["created_at"]),
        )

    async def append(
        self,
        sender: Identity,
        text: Optional[str],
        attachment: Optional[Attachment] = None,
    ) -> Message:
        self._appends_in_flight += 1
        try:
            # 1. Write to the log first (source of truth)
            message = await self._log.append(sender, text, attachment)

            # 2. Extend the cached head (best effort)
            try:
                pushed = await self._redis.lpushx(
                    CACHE_KEY, self._serialize_message(message)
                )
                if pushed:
                    await self._redis.ltrim(CACHE_KEY, 0, self._cache_limit - 1)
                    await self._redis.expire(CACHE_KEY, self._ttl)
                    logger.debug(f"Cache UPDATED for {CACHE_KEY}")
            except Exception as e:
                logger.warning(f"Redis cache update error: {str(e)}")
        finally:
            self._appends_in_flight -= 1
            self._append_generation += 1

        return message

    async def recent(self, limit: int, offset: int = 0) -> list[Message]:
        """
        Page of recent messages (oldest first), served from Redis when the
        whole page lies inside the cached head.
        """
        if limit <= 0:
            return []
        offset = max(offset, 0)
        if offset + limit > self._cache_limit:
            logger.debug(
                f"Page {offset}+{limit} > cache limit {self._cache_limit}, bypassing cache"
            )
            return await self._log.recent(limit, offset)

        # 1. Try cache first (fast path)
        try:
            cached = await self._redis.lrange(CACHE_KEY, offset, offset + limit - 1)
            if len(cached) == limit:
                logger.debug(f"Cache HIT for {CACHE_KEY}")
                messages = [self._deserialize_message(item) for item in cached]
                messages.reverse()  # [newest, ..., oldest] → chronological
                return messages
        except Exception as e:
            logger.warning(f"Redis cache read error for {CACHE_KEY}: {str(e)}")

        # 2. Cache miss - read the log, then repopulate the cached head
        logger.debug(f"Cache MISS for {CACHE_KEY}")
        generation = self._append_generation
        head = await self._log.recent(self._cache_limit, 0)
        if self._appends_raced(generation):
            # The head may predate an append that skipped the cold list
            logger.debug(f"Append raced the read, leaving {CACHE_KEY} cold")
        else:
            await self._populate(head)
            if self._appends_raced(generation):
                await self._invalidate()

        # head is oldest-first; the requested page ends `offset` from its end
        end = len(head) - offset
        if end <= 0:
            return []
        return head[max(end - limit, 0):end]

    def _appends_raced(self, generation: int) -> bool:
        return self._appends_in_flight > 0 or self._append_generation != generation

    async def _populate(self, head: list[Message]) -> None:
        try:
            await self._redis.delete(CACHE_KEY)
            if head:
                newest_first = [self._serialize_message(m) for m in reversed(head)]
                await self._redis.rpush(CACHE_KEY, *newest_first)
                await self._redis.expire(CACHE_KEY, self._ttl)
                logger.debug(f"Cache POPULATED for {CACHE_KEY}")
        except Exception as e:
            logger.warning(f"Redis cache write error for {CACHE_KEY}: {str(e)}")

    async def _invalidate(self) -> None:
        try:
            await self._redis.delete(CACHE_KEY)
            logger.debug(f"Cache INVALIDATED for {CACHE_KEY}")
        except Exception as e:
            logger.warning(f"Redis cache delete error for {CACHE_KEY}: {str(e)}")
