"""
Auth API Router - registration and login.

Flow:
  POST /auth/register → RegisterUserCommand → CredentialStore.create
  POST /auth/login    → LoginUserCommand → CredentialStore.verify → SessionTokenCodec.issue
"""

from logging import getLogger
from typing import Optional

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from chatrelay.application.commands.auth import (
    LoginUserCommand,
    LoginUserHandler,
    RegisterUserCommand,
    RegisterUserHandler,
)
from chatrelay.application.dto.chat import IdentityDTO

logger = getLogger(__name__)


# ==================== REQUEST/RESPONSE MODELS ====================


class RegisterRequest(BaseModel):
    username: str
    password: str
    display_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user: IdentityDTO


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    """
    Matches the WebSocket authenticate flow:
    {
        "token": "<jwt>",
        "token_type": "bearer",
        "expires_in": 3600,
        "user": {"id": "uuid", "display_name": "Alice"}
    }
    """

    token: str
    token_type: str = "bearer"
    expires_in: int
    user: IdentityDTO


# ==================== ROUTER ====================

router = APIRouter(prefix="/auth", tags=["auth"])


# ==================== ENDPOINTS ====================


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
@inject
async def register(
    request: RegisterRequest,
    handler: FromDishka[RegisterUserHandler],
):
    """Create a user. 409 if the username is taken."""
    try:
        identity = await handler.execute(
            RegisterUserCommand(
                username=request.username,
                password=request.password,
                display_name=request.display_name,
            )
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    logger.info(f"[Auth] Registered {identity.username} ({identity.id})")
    return RegisterResponse(user=IdentityDTO.from_entity(identity))


@router.post("/login", response_model=LoginResponse)
@inject
async def login(
    request: LoginRequest,
    handler: FromDishka[LoginUserHandler],
):
    try:
        result = await handler.execute(
            LoginUserCommand(username=request.username, password=request.password)
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return LoginResponse(
        token=result.token,
        expires_in=result.expires_in,
        user=IdentityDTO.from_entity(result.identity),
    )
