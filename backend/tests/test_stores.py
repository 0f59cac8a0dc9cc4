"""
Tests for the in-memory credential store and message log, and the local blob store.
"""

import asyncio
import os
import threading

import pytest

from chatrelay.domain.exceptions import (
    AuthError,
    AuthErrorReason,
    StorageError,
    StorageErrorKind,
)
from chatrelay.domain.value_objects.user_id import UserId
from chatrelay.infrastructure.auth import check_secret, hash_secret
from chatrelay.infrastructure.persistence import in_memory_credential_store
from chatrelay.infrastructure.persistence import (
    InMemoryCredentialStore,
    InMemoryMessageLog,
)
from chatrelay.infrastructure.storage import LocalBlobStore
from conftest import make_identity


def test_password_hash_round_trip():
    hashed = hash_secret("hunter2")

    assert hashed != "hunter2"
    assert check_secret(hashed, "hunter2")
    assert not check_secret(hashed, "hunter3")
    assert not check_secret("", "hunter2")


@pytest.mark.asyncio
class TestInMemoryCredentialStore:
    async def test_create_and_verify(self):
        store = InMemoryCredentialStore()
        created = await store.create("alice", "pw", "Alice")

        assert await store.verify("alice", "pw") == created
        assert await store.get(created.id) == created
        assert created.display_name == "Alice"

    async def test_display_name_defaults_to_username(self):
        identity = await InMemoryCredentialStore().create("bob", "pw")

        assert identity.display_name == "bob"

    async def test_duplicate_username(self):
        store = InMemoryCredentialStore()
        await store.create("alice", "pw")

        with pytest.raises(AuthError) as exc:
            await store.create("alice", "other")
        assert exc.value.reason == AuthErrorReason.ALREADY_EXISTS

    @pytest.mark.parametrize("username, password", [("alice", "wrong"), ("nobody", "pw")])
    async def test_bad_credentials(self, username, password):
        store = InMemoryCredentialStore()
        await store.create("alice", "pw")

        with pytest.raises(AuthError) as exc:
            await store.verify(username, password)
        assert exc.value.reason == AuthErrorReason.BAD_CREDENTIALS

    async def test_hashing_runs_off_the_event_loop(self, monkeypatch):
        gate = threading.Event()
        seen = {}

        def slow_hash(secret):
            seen["thread"] = threading.current_thread()
            seen["released"] = gate.wait(timeout=2)
            return f"hashed:{secret}"

        monkeypatch.setattr(in_memory_credential_store, "hash_secret", slow_hash)
        store = InMemoryCredentialStore()

        task = asyncio.create_task(store.create("alice", "pw"))
        await asyncio.sleep(0.05)
        gate.set()
        await task

        assert seen["released"]
        assert seen["thread"] is not threading.main_thread()

    async def test_password_check_runs_off_the_event_loop(self, monkeypatch):
        threads = []

        def recording_check(password_hash, secret):
            threads.append(threading.current_thread())
            return True

        store = InMemoryCredentialStore()
        await store.create("alice", "pw")
        monkeypatch.setattr(in_memory_credential_store, "check_secret", recording_check)

        await store.verify("alice", "pw")

        assert threads and threads[0] is not threading.main_thread()

    async def test_concurrent_creates_of_one_name(self):
        store = InMemoryCredentialStore()

        results = await asyncio.gather(
            store.create("alice", "pw"),
            store.create("alice", "pw"),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, AuthError)]
        assert len(failures) == 1
        assert failures[0].reason == AuthErrorReason.ALREADY_EXISTS

    async def test_get_unknown(self):
        store = InMemoryCredentialStore()

        assert await store.get(UserId("00000000-0000-0000-0000-000000000000")) is None


@pytest.mark.asyncio
class TestInMemoryMessageLog:
    async def test_ids_are_sequential(self):
        log = InMemoryMessageLog()
        sender = make_identity()

        first = await log.append(sender, "a")
        second = await log.append(sender, "b")

        assert (first.id.value, second.id.value) == (1, 2)
        assert first.created_at <= second.created_at

    async def test_recent_pages_oldest_first(self):
        log = InMemoryMessageLog()
        sender = make_identity()
        for n in range(1, 8):
            await log.append(sender, str(n))

        assert [m.text for m in await log.recent(3)] == ["5", "6", "7"]
        assert [m.text for m in await log.recent(3, offset=3)] == ["2", "3", "4"]
        assert [m.text for m in await log.recent(3, offset=6)] == ["1"]
        assert await log.recent(3, offset=7) == []
        assert await log.recent(0) == []


@pytest.mark.asyncio
class TestLocalBlobStore:
    async def test_store_writes_file_and_returns_public_url(self, tmp_path):
        store = LocalBlobStore(base_dir=str(tmp_path), public_path="/files", public_base_url="")

        url = await store.store(b"hello", "text/plain", "note.txt")

        assert url.startswith("/files/")
        key = url.rsplit("/", 1)[1]
        assert key.endswith("_note.txt")
        with open(os.path.join(tmp_path, key), "rb") as f:
            assert f.read() == b"hello"

    async def test_filename_is_sanitized(self, tmp_path):
        store = LocalBlobStore(base_dir=str(tmp_path), public_path="/files", public_base_url="")

        url = await store.store(b"x", "text/plain", "../../etc/passwd")

        key = url.rsplit("/", 1)[1]
        assert key.endswith("_etc_passwd")
        assert os.listdir(tmp_path) == [key]

    async def test_missing_filename_uses_content_type(self, tmp_path):
        store = LocalBlobStore(base_dir=str(tmp_path), public_path="/files", public_base_url="")

        url = await store.store(b"\x89PNG", "image/png")

        assert url.endswith("_blob.png")

    async def test_public_base_url_prefix(self, tmp_path):
        store = LocalBlobStore(
            base_dir=str(tmp_path),
            public_path="media/",
            public_base_url="https://cdn.example.com/",
        )

        url = await store.store(b"x", "text/plain", "a.txt")

        assert url.startswith("https://cdn.example.com/media/")

    async def test_each_store_gets_a_new_key(self, tmp_path):
        store = LocalBlobStore(base_dir=str(tmp_path), public_path="/files", public_base_url="")

        urls = {await store.store(b"x", "text/plain", "same.txt") for _ in range(5)}

        assert len(urls) == 5
        assert len(os.listdir(tmp_path)) == 5

    async def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_bytes(b"")
        store = LocalBlobStore(base_dir=str(blocker), public_path="/files", public_base_url="")

        with pytest.raises(StorageError) as exc:
            await store.store(b"x", "text/plain", "a.txt")
        assert exc.value.kind == StorageErrorKind.BLOB_UNAVAILABLE
