"""
RegisterUser Command - create a user in the credential store.

Maps from: POST /auth/register
"""

from dataclasses import dataclass
from typing import Optional

from chatrelay.application.common.interfaces import Command, CommandHandler
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.ports.repositories import CredentialStore

MAX_USERNAME_LENGTH = 64
MAX_DISPLAY_NAME_LENGTH = 64


@dataclass(frozen=True)
class RegisterUserCommand(Command[Identity]):
    username: str
    password: str
    display_name: Optional[str] = None


class RegisterUserHandler(CommandHandler[Identity]):
    _credential_store: CredentialStore

    def __init__(self, credential_store: CredentialStore):
        self._credential_store = credential_store

    async def execute(self, command: RegisterUserCommand) -> Identity:
        """
        Raises:
            ValueError: missing or oversized fields
            AuthError: ALREADY_EXISTS if the username is taken
        """
        username = (command.username or "").strip()
        if not username or not command.password:
            raise ValueError("Username and password are required.")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValueError(f"Username is limited to {MAX_USERNAME_LENGTH} characters.")

        display_name = (command.display_name or "").strip() or username
        if len(display_name) > MAX_DISPLAY_NAME_LENGTH:
            raise ValueError(
                f"Display name is limited to {MAX_DISPLAY_NAME_LENGTH} characters."
            )

        return await self._credential_store.create(
            username, command.password, display_name
        )
