"""
Messages API Router - chat history for clients catching up.

Live messages arrive over the WebSocket; this endpoint serves what was sent
before the client connected.
"""

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from chatrelay.application.dto.chat import MessageDTO
from chatrelay.application.queries.chat import (
    GetRecentMessagesHandler,
    GetRecentMessagesQuery,
)
from chatrelay.config.settings import Config
from chatrelay.presentation.dependencies.auth import AuthUser, get_current_user


class HistoryResponse(BaseModel):
    messages: list[MessageDTO]
    limit: int
    offset: int


router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/history", response_model=HistoryResponse)
@inject
async def get_history(
    handler: FromDishka[GetRecentMessagesHandler],
    limit: int = Query(Config.HISTORY_DEFAULT_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
):
    """
    Oldest-first page of recent messages. offset=0 is the newest page;
    limit is capped at HISTORY_MAX_LIMIT.
    """
    messages = await handler.execute(GetRecentMessagesQuery(limit=limit, offset=offset))
    return HistoryResponse(
        messages=[MessageDTO.from_entity(m) for m in messages],
        limit=min(limit, Config.HISTORY_MAX_LIMIT),
        offset=offset,
    )
