"""
Unit tests for PresenceRegistry.

Run with: pytest tests/test_presence_registry.py -v
"""

import asyncio
from datetime import datetime, timezone

import pytest

from chatrelay.application.dto.events import (
    MessageDeliveredEvent,
    PresenceChangedEvent,
    SessionSupersededEvent,
)
from chatrelay.application.realtime.session import (
    CLOSE_TRY_AGAIN_LATER,
    ConnectionSession,
)
from chatrelay.domain.entities.connection import ConnectionState
from chatrelay.domain.entities.message import Message
from chatrelay.domain.exceptions import (
    AuthError,
    AuthErrorReason,
    ConnectionClosedError,
)
from chatrelay.domain.value_objects.connection_id import ConnectionId
from chatrelay.domain.value_objects.message_id import MessageId
from conftest import drain, make_identity


async def _connected(registry, outbox_size=16) -> ConnectionSession:
    session = ConnectionSession(outbox_size=outbox_size)
    await registry.register(session)
    return session


def _message(sender, n=1) -> Message:
    return Message(
        id=MessageId(n),
        sender=sender,
        text=f"message {n}",
        created_at=datetime.now(timezone.utc),
    )


@pytest.mark.asyncio
class TestBinding:
    async def test_registered_connection_is_not_online(self, registry):
        session = await _connected(registry)

        assert session.connection.state is ConnectionState.UNAUTHENTICATED
        assert await registry.snapshot() == frozenset()

    async def test_bind_makes_identity_online(self, registry):
        session = await _connected(registry)
        alice = make_identity("alice")

        result = await registry.bind(session.id, alice)

        assert result.displaced is None
        assert session.connection.is_active
        assert await registry.snapshot() == frozenset({alice})

    async def test_online_set_matches_active_connections(self, registry):
        alice, bob = make_identity("alice"), make_identity("bob")
        s1, s2, s3 = [await _connected(registry) for _ in range(3)]
        await registry.bind(s1.id, alice)
        await registry.bind(s2.id, bob)

        assert await registry.snapshot() == frozenset({alice, bob})
        assert registry.connection_count == 3
        assert not registry.is_active(s3.id)

    async def test_switching_identity_releases_the_old_one(self, registry):
        session = await _connected(registry)
        alice, bob = make_identity("alice"), make_identity("bob")
        await registry.bind(session.id, alice)

        result = await registry.bind(session.id, bob)

        assert result.rebind
        assert await registry.snapshot() == frozenset({bob})

    async def test_bind_unknown_connection_fails(self, registry):
        with pytest.raises(ConnectionClosedError):
            await registry.bind(ConnectionId.new(), make_identity())

    async def test_bind_after_unbind_fails(self, registry):
        session = await _connected(registry)
        await registry.unbind(session.id)

        with pytest.raises(ConnectionClosedError):
            await registry.bind(session.id, make_identity())

    async def test_register_twice_fails(self, registry):
        session = await _connected(registry)

        with pytest.raises(ValueError):
            await registry.register(session)


@pytest.mark.asyncio
class TestMostRecentAuthenticationWins:
    async def test_newer_connection_displaces_older(self, registry):
        alice = make_identity("alice")
        old, new = await _connected(registry), await _connected(registry)
        await registry.bind(old.id, alice)

        result = await registry.bind(new.id, alice)

        assert result.displaced == old.id
        assert old.connection.state is ConnectionState.UNAUTHENTICATED
        assert new.connection.is_active
        assert await registry.snapshot() == frozenset({alice})
        assert isinstance((await drain(old))[-1], SessionSupersededEvent)

    async def test_no_resurrection_after_newer_disconnects(self, registry):
        alice = make_identity("alice")
        old, new = await _connected(registry), await _connected(registry)
        await registry.bind(old.id, alice)
        await registry.bind(new.id, alice)

        assert await registry.unbind(new.id) is True
        assert await registry.snapshot() == frozenset()
        assert not registry.is_active(old.id)

    async def test_displaced_connection_may_authenticate_again(self, registry):
        alice = make_identity("alice")
        old, new = await _connected(registry), await _connected(registry)
        await registry.bind(old.id, alice)
        await registry.bind(new.id, alice)

        result = await registry.bind(old.id, alice)

        assert result.displaced == new.id
        assert old.connection.is_active
        assert not new.connection.is_active


@pytest.mark.asyncio
class TestUnbind:
    async def test_unbind_is_idempotent(self, registry):
        session = await _connected(registry)
        await registry.bind(session.id, make_identity())

        assert await registry.unbind(session.id) is True
        assert await registry.unbind(session.id) is False
        assert session.connection.is_closed
        assert not registry.is_registered(session.id)

    async def test_unbind_unauthenticated_does_not_change_presence(self, registry):
        session = await _connected(registry)

        assert await registry.unbind(session.id) is False

    async def test_require_active(self, registry):
        session = await _connected(registry)
        alice = make_identity()

        with pytest.raises(AuthError) as exc:
            await registry.require_active(session.id)
        assert exc.value.reason == AuthErrorReason.NOT_AUTHENTICATED

        await registry.bind(session.id, alice)
        assert await registry.require_active(session.id) == alice


@pytest.mark.asyncio
class TestBroadcast:
    async def test_presence_goes_to_active_connections_only(self, registry):
        alice, bob = make_identity("alice", "Alice"), make_identity("bob", "Bob")
        s1, s2, idle = [await _connected(registry) for _ in range(3)]
        await registry.bind(s2.id, bob)
        await registry.bind(s1.id, alice)

        users = await registry.broadcast_presence()

        assert [u.display_name for u in users] == ["Alice", "Bob"]
        for session in (s1, s2):
            (event,) = await drain(session)
            assert isinstance(event, PresenceChangedEvent)
            assert [u.display_name for u in event.users] == ["Alice", "Bob"]
        assert await drain(idle) == []

    async def test_message_sequence_is_shared_by_all_recipients(self, registry):
        alice, bob = make_identity("alice"), make_identity("bob")
        s1, s2 = await _connected(registry), await _connected(registry)
        await registry.bind(s1.id, alice)
        await registry.bind(s2.id, bob)

        seqs = [await registry.broadcast_message(_message(alice, n)) for n in (1, 2, 3)]

        assert seqs == [1, 2, 3]
        for session in (s1, s2):
            events = await drain(session)
            assert all(isinstance(e, MessageDeliveredEvent) for e in events)
            assert [e.seq for e in events] == [1, 2, 3]
            assert [e.message.id for e in events] == [1, 2, 3]

    async def test_concurrent_broadcasts_have_one_order(self, registry):
        sessions = [await _connected(registry, outbox_size=64) for _ in range(3)]
        for n, session in enumerate(sessions):
            await registry.bind(session.id, make_identity(f"user{n}"))
        sender = make_identity("sender")

        await asyncio.gather(
            *(registry.broadcast_message(_message(sender, n)) for n in range(1, 21))
        )

        orders = [[(e.seq, e.message.id) for e in await drain(s)] for s in sessions]
        assert orders[0] == orders[1] == orders[2]
        assert [seq for seq, _ in orders[0]] == list(range(1, 21))

    async def test_slow_consumer_is_closed(self, registry):
        alice = make_identity("alice")
        slow = await _connected(registry, outbox_size=1)
        await registry.bind(slow.id, alice)

        await registry.broadcast_message(_message(alice, 1))
        await registry.broadcast_message(_message(alice, 2))

        assert slow.closing
        assert slow.close_code == CLOSE_TRY_AGAIN_LATER
        assert await slow.next_event() is None
