"""
Base interfaces for CQRS pattern.

Usage:
    @dataclass(frozen=True)
    class RegisterUserCommand(Command[Identity]):
        username: str
        password: str

    class RegisterUserHandler(CommandHandler[Identity]):
        def __init__(self, credential_store: CredentialStore):
            self._credential_store = credential_store

        async def execute(self, cmd: RegisterUserCommand) -> Identity:
            return await self._credential_store.create(cmd.username, cmd.password)
"""
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

T = TypeVar("T")
class Command(ABC, Generic[T]):
    """Base class for write operations"""
    pass

class CommandHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, command: Command[T]) -> T:
        """Execute the command and return a result of type T"""
        ...

class Query(ABC, Generic[T]):
    """Base class for read operations"""
    pass

class QueryHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, query: Query[T]) -> T:
        """Execute the query and return a result of type T"""
        ...
