"""
LoginUser Command - verify credentials and issue a session token.

Maps from: POST /auth/login
"""

from dataclasses import dataclass

from chatrelay.application.common.interfaces import Command, CommandHandler
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.ports.repositories import CredentialStore
from chatrelay.services.session_token_codec import SessionTokenCodec


@dataclass
class LoginResult:
    token: str
    identity: Identity
    expires_in: int


@dataclass(frozen=True)
class LoginUserCommand(Command[LoginResult]):
    username: str
    password: str


class LoginUserHandler(CommandHandler[LoginResult]):
    def __init__(
        self,
        credential_store: CredentialStore,
        token_codec: SessionTokenCodec,
    ):
        self._credential_store = credential_store
        self._token_codec = token_codec

    async def execute(self, command: LoginUserCommand) -> LoginResult:
        """
        Raises:
            ValueError: missing fields
            AuthError: BAD_CREDENTIALS
        """
        username = (command.username or "").strip()
        if not username or not command.password:
            raise ValueError("Username and password are required.")

        identity = await self._credential_store.verify(username, command.password)
        return LoginResult(
            token=self._token_codec.issue(identity),
            identity=identity,
            expires_in=self._token_codec.ttl_seconds,
        )
