"""
TraceNotes Backend - Storage Layer
===================================

What:  The Storage Port (NoteStore) and its backends.

Backend Inventory:
    - InMemoryNoteStore: process-local dict (default, tests)
    - SqlNoteStore:      async SQLAlchemy (PostgreSQL via asyncpg, SQLite via aiosqlite)
    - RedisNoteStore:    redis.asyncio, optional per-note TTL

`build_note_store()` selects the backend named by STORAGE_BACKEND.
"""

from opentelemetry.trace import Tracer

from tracenotes.config import Settings
from tracenotes.storage.base import NoteStore
from tracenotes.storage.memory_store import InMemoryNoteStore


def build_note_store(settings: Settings, tracer: Tracer) -> NoteStore:
    """
    Create the NoteStore configured by `settings`.

    SQL and Redis backends are imported here so a memory-only deployment
    never touches their drivers.
    """
    timeout = settings.storage_timeout_seconds

    if settings.storage_backend == "sql":
        from tracenotes.database import build_engine
        from tracenotes.storage.sql_store import SqlNoteStore

        return SqlNoteStore(
            tracer,
            build_engine(settings),
            timeout=timeout,
            auto_create_schema=settings.db_auto_create_schema,
        )

    if settings.storage_backend == "redis":
        from tracenotes.storage.redis_store import RedisNoteStore

        return RedisNoteStore.from_url(
            settings.redis_url,
            tracer,
            timeout=timeout,
            ttl_seconds=settings.redis_note_ttl,
        )

    return InMemoryNoteStore(tracer, timeout=timeout)


__all__ = ["NoteStore", "InMemoryNoteStore", "build_note_store"]
