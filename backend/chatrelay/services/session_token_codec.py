"""
Session Token Codec - signed, time-limited tokens binding a client to a user.

Tokens are HS256 JWTs:
    {"sub": <user id>, "name": <display name>, "iat", "exp", "iss", "aud"}

verify() checks the signature before expiry, so a forged expired token is
reported as BAD_SIGNATURE rather than EXPIRED.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from chatrelay.config.settings import Config
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.exceptions import AuthError, AuthErrorReason
from chatrelay.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "iat", "exp", "iss", "aud"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionTokenCodec:
    def __init__(
        self,
        secret: str = Config.SESSION_TOKEN_SECRET,
        issuer: str = Config.SESSION_TOKEN_ISSUER,
        audience: str = Config.SESSION_TOKEN_AUDIENCE,
        ttl_seconds: int = Config.SESSION_TOKEN_TTL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("SESSION_TOKEN_SECRET must be configured")
        if ttl_seconds <= 0:
            raise ValueError("Session token TTL must be positive")
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or _utcnow

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, identity: Identity) -> str:
        now = self._clock()
        payload = {
            "sub": identity.id.value,
            "name": identity.display_name,
            "iat": now,
            "exp": now + self._ttl,
            "iss": self._issuer,
            "aud": self._audience,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> UserId:
        """
        Validate a token and return the user id it was issued for.

        Raises:
            AuthError: MALFORMED, BAD_SIGNATURE or EXPIRED
        """
        if not token or not isinstance(token, str):
            raise AuthError(AuthErrorReason.MALFORMED, "Token is missing")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise AuthError(AuthErrorReason.EXPIRED, "Token has expired")
        except jwt.InvalidSignatureError:
            raise AuthError(AuthErrorReason.BAD_SIGNATURE, "Token signature mismatch")
        except jwt.InvalidTokenError as e:
            logger.debug(f"[TokenCodec] Rejected token: {e}")
            raise AuthError(AuthErrorReason.MALFORMED, f"Invalid token: {e}")

        try:
            return UserId(claims["sub"])
        except (TypeError, ValueError):
            raise AuthError(AuthErrorReason.MALFORMED, "Token subject is not a user id")
