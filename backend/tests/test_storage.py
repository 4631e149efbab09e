"""
TraceNotes Backend - Storage Backend Tests
===========================================

What:  Tests for the Storage Port contract across backends.
How:   InMemoryNoteStore directly; SqlNoteStore against a temporary SQLite
       file through aiosqlite; RedisNoteStore against an AsyncMock client.

What we test:
    ✅ store → get returns an equal note; unknown ids raise NotFoundError
    ✅ backend exceptions and timeouts surface as StorageError only
    ✅ each call opens a child span carrying db.system and note.id
    ✅ Redis key layout, TTL handling, and corrupt-value handling
    ✅ build_note_store picks the backend named in settings
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from opentelemetry.trace import StatusCode

from tracenotes.config import Settings
from tracenotes.database import build_engine
from tracenotes.exceptions import NotFoundError, StorageError
from tracenotes.storage import InMemoryNoteStore, build_note_store
from tracenotes.storage.base import NoteStore
from tracenotes.storage.redis_store import RedisNoteStore
from tracenotes.storage.sql_store import SqlNoteStore


class SlowNoteStore(NoteStore):
    db_system = "slow"

    async def _store(self, note):
        await asyncio.sleep(1)

    async def _get(self, note_id):
        await asyncio.sleep(1)


class TestInMemoryNoteStore:

    @pytest.mark.asyncio
    async def test_store_then_get(self, memory_store, sample_note):
        await memory_store.store(None, sample_note)

        assert await memory_store.get(None, sample_note.note_id) == sample_note

    @pytest.mark.asyncio
    async def test_get_unknown_raises_not_found(self, memory_store, sample_note):
        with pytest.raises(NotFoundError):
            await memory_store.get(None, sample_note.note_id)

    @pytest.mark.asyncio
    async def test_calls_open_client_spans(self, memory_store, sample_note, find_span):
        await memory_store.store(None, sample_note)

        span = find_span("NoteStore.store")
        assert span.attributes["db.system"] == "memory"
        assert span.attributes["note.id"] == str(sample_note.note_id)
        assert span.status.status_code == StatusCode.UNSET


class TestStorageFailures:

    @pytest.mark.asyncio
    async def test_backend_exception_becomes_storage_error(self, failing_store, sample_note):
        with pytest.raises(StorageError) as exc_info:
            await failing_store.store(None, sample_note)

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert exc_info.value.context["original_error"] == "ConnectionError"
        # Backend details stay out of the client-facing message
        assert "unreachable" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout_becomes_storage_error(self, tracer, sample_note, find_span):
        store = SlowNoteStore(tracer, timeout=0.05)

        with pytest.raises(StorageError) as exc_info:
            await store.get(None, sample_note.note_id)

        assert exc_info.value.context["original_error"] == "TimeoutError"
        assert find_span("NoteStore.get").status.status_code == StatusCode.ERROR


class TestSqlNoteStore:

    @pytest.fixture
    def sql_settings(self, tmp_path):
        return Settings(
            storage_backend="sql",
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}",
        )

    @pytest.mark.asyncio
    async def test_round_trip(self, tracer, sql_settings, sample_note):
        store = SqlNoteStore(tracer, build_engine(sql_settings))
        await store.create_schema()
        try:
            await store.store(None, sample_note)
            fetched = await store.get(None, sample_note.note_id)
        finally:
            await store.close()

        assert fetched == sample_note
        assert fetched.created.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_unknown_raises_not_found(self, tracer, sql_settings, sample_note):
        store = SqlNoteStore(tracer, build_engine(sql_settings), auto_create_schema=True)
        await store.startup()
        try:
            with pytest.raises(NotFoundError):
                await store.get(None, sample_note.note_id)
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_missing_table_is_storage_error(self, tracer, sql_settings, sample_note):
        store = SqlNoteStore(tracer, build_engine(sql_settings))
        try:
            with pytest.raises(StorageError):
                await store.store(None, sample_note)
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_health_check_and_db_system(self, tracer, sql_settings):
        store = SqlNoteStore(tracer, build_engine(sql_settings))
        try:
            assert await store.health_check() is True
            assert store.db_system == "sqlite"
        finally:
            await store.close()


class TestRedisNoteStore:

    def _client(self):
        client = AsyncMock()
        client.set = AsyncMock(return_value=True)
        client.get = AsyncMock(return_value=None)
        client.ping = AsyncMock(return_value=True)
        return client

    @pytest.mark.asyncio
    async def test_store_writes_json_under_note_key(self, tracer, sample_note):
        client = self._client()
        store = RedisNoteStore(tracer, client)

        await store.store(None, sample_note)

        client.set.assert_awaited_once_with(
            f"note:{sample_note.note_id}",
            sample_note.model_dump_json(),
            ex=None,
        )

    @pytest.mark.asyncio
    async def test_store_applies_ttl(self, tracer, sample_note):
        client = self._client()
        store = RedisNoteStore(tracer, client, ttl_seconds=600)

        await store.store(None, sample_note)

        assert client.set.await_args.kwargs["ex"] == 600

    @pytest.mark.asyncio
    async def test_get_decodes_stored_note(self, tracer, sample_note):
        client = self._client()
        client.get.return_value = sample_note.model_dump_json()
        store = RedisNoteStore(tracer, client)

        assert await store.get(None, sample_note.note_id) == sample_note

    @pytest.mark.asyncio
    async def test_missing_key_raises_not_found(self, tracer, sample_note):
        store = RedisNoteStore(tracer, self._client())

        with pytest.raises(NotFoundError):
            await store.get(None, sample_note.note_id)

    @pytest.mark.asyncio
    async def test_corrupt_value_is_storage_error(self, tracer, sample_note):
        client = self._client()
        client.get.return_value = "{not a note"
        store = RedisNoteStore(tracer, client)

        with pytest.raises(StorageError) as exc_info:
            await store.get(None, sample_note.note_id)

        assert exc_info.value.context["original_error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_connection_error_is_storage_error(self, tracer, sample_note):
        client = self._client()
        client.set.side_effect = ConnectionError("connection refused")
        store = RedisNoteStore(tracer, client)

        with pytest.raises(StorageError):
            await store.store(None, sample_note)

    @pytest.mark.asyncio
    async def test_health_check_reports_ping_failure(self, tracer):
        client = self._client()
        client.ping.side_effect = ConnectionError("connection refused")
        store = RedisNoteStore(tracer, client)

        assert await store.health_check() is False


class TestBuildNoteStore:

    def test_memory_is_default(self, tracer):
        store = build_note_store(Settings(), tracer)
        assert isinstance(store, InMemoryNoteStore)

    def test_sql_backend(self, tracer, tmp_path):
        settings = Settings(
            storage_backend="sql",
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}",
            storage_timeout_seconds=2.5,
        )
        store = build_note_store(settings, tracer)
        assert isinstance(store, SqlNoteStore)
        assert store._timeout == 2.5

    def test_redis_backend(self, tracer):
        settings = Settings(storage_backend="redis", redis_url="redis://localhost:6379/1")
        store = build_note_store(settings, tracer)
        assert isinstance(store, RedisNoteStore)
