"""
Authentication Dependency for FastAPI.

- Extracts the session token from the Authorization header (Bearer scheme)
- Verifies it with the same SessionTokenCodec the WebSocket uses
- Returns AuthUser for use in route handlers

A missing or invalid token raises AuthError, which the app maps to 401.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chatrelay.domain.exceptions import AuthError, AuthErrorReason
from chatrelay.domain.value_objects.user_id import UserId
from chatrelay.services.session_token_codec import SessionTokenCodec


@dataclass
class AuthUser:
    user_id: UserId


security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    Raises:
        AuthError: NOT_AUTHENTICATED without a bearer token, otherwise
            whatever SessionTokenCodec.verify() rejects the token with
    """
    if credentials is None or not credentials.credentials:
        raise AuthError(
            AuthErrorReason.NOT_AUTHENTICATED, "Missing bearer token"
        )

    codec = await request.app.state.dishka_container.get(SessionTokenCodec)
    return AuthUser(user_id=codec.verify(credentials.credentials))
