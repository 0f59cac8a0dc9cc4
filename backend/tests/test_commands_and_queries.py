"""
Unit tests for the auth commands and the history / presence queries.
"""

import pytest

from chatrelay.application.commands.auth import (
    LoginUserCommand,
    LoginUserHandler,
    RegisterUserCommand,
    RegisterUserHandler,
)
from chatrelay.application.queries import (
    GetOnlineUsersHandler,
    GetOnlineUsersQuery,
    GetRecentMessagesHandler,
    GetRecentMessagesQuery,
)
from chatrelay.application.realtime import ConnectionSession
from chatrelay.domain.exceptions import AuthError, AuthErrorReason
from conftest import make_identity


@pytest.mark.asyncio
class TestRegisterUser:
    async def test_registers_with_trimmed_names(self, credential_store):
        handler = RegisterUserHandler(credential_store)

        identity = await handler.execute(
            RegisterUserCommand(username=" alice ", password="pw", display_name=" Alice ")
        )

        assert identity.username == "alice"
        assert identity.display_name == "Alice"
        assert await credential_store.get(identity.id) == identity

    @pytest.mark.parametrize(
        "username, password, display_name",
        [("", "pw", None), ("alice", "", None), ("a" * 65, "pw", None), ("alice", "pw", "d" * 65)],
    )
    async def test_rejects_bad_input(self, credential_store, username, password, display_name):
        handler = RegisterUserHandler(credential_store)

        with pytest.raises(ValueError):
            await handler.execute(
                RegisterUserCommand(username=username, password=password, display_name=display_name)
            )


@pytest.mark.asyncio
class TestLoginUser:
    async def test_login_returns_verifiable_token(self, credential_store, token_codec):
        identity = await credential_store.create("alice", "pw")
        handler = LoginUserHandler(credential_store, token_codec)

        result = await handler.execute(LoginUserCommand(username="alice", password="pw"))

        assert result.identity == identity
        assert result.expires_in == 3600
        assert token_codec.verify(result.token) == identity.id

    async def test_wrong_password(self, credential_store, token_codec):
        await credential_store.create("alice", "pw")
        handler = LoginUserHandler(credential_store, token_codec)

        with pytest.raises(AuthError) as exc:
            await handler.execute(LoginUserCommand(username="alice", password="nope"))
        assert exc.value.reason == AuthErrorReason.BAD_CREDENTIALS


@pytest.mark.asyncio
class TestQueries:
    async def test_recent_messages_are_clamped(self, message_log):
        sender = make_identity()
        for n in range(10):
            await message_log.append(sender, f"m{n}")
        handler = GetRecentMessagesHandler(message_log, max_limit=4)

        messages = await handler.execute(GetRecentMessagesQuery(limit=50))

        assert [m.text for m in messages] == ["m6", "m7", "m8", "m9"]

    async def test_recent_messages_reject_negative_offset(self, message_log):
        handler = GetRecentMessagesHandler(message_log)

        with pytest.raises(ValueError):
            await handler.execute(GetRecentMessagesQuery(limit=5, offset=-1))

    async def test_online_users_sorted_by_display_name(self, registry):
        for name in ("carol", "alice", "Bob"):
            session = ConnectionSession()
            await registry.register(session)
            await registry.bind(session.id, make_identity(name.lower(), name))

        users = await GetOnlineUsersHandler(registry).execute(GetOnlineUsersQuery())

        assert [u.display_name for u in users] == ["alice", "Bob", "carol"]
