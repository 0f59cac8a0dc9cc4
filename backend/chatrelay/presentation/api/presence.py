"""Presence API Router - who is online right now."""

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chatrelay.application.dto.chat import IdentityDTO
from chatrelay.application.queries.presence import (
    GetOnlineUsersHandler,
    GetOnlineUsersQuery,
)
from chatrelay.presentation.dependencies.auth import AuthUser, get_current_user


class OnlineUsersResponse(BaseModel):
    users: list[IdentityDTO]


router = APIRouter(prefix="/presence", tags=["presence"])


@router.get("/online", response_model=OnlineUsersResponse)
@inject
async def get_online_users(
    handler: FromDishka[GetOnlineUsersHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    users = await handler.execute(GetOnlineUsersQuery())
    return OnlineUsersResponse(users=[IdentityDTO.from_entity(u) for u in users])
