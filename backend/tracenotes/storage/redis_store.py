"""
TraceNotes Backend - Redis Storage Backend
===========================================

What:  NoteStore implementation over redis.asyncio.
How:   Each note is one string key `note:<uuid>` holding the note's JSON.
       With a TTL configured, Redis expires the key and later lookups
       report NotFoundError ("no longer retained").
Who:   Built by the storage factory when STORAGE_BACKEND=redis.

Key layout:
    note:1b4e28ba-2fa1-4d3b-a3f5-ef19b5a7633b → {"note_id": ..., "title": ..., ...}
"""

import logging
from uuid import UUID

import redis.asyncio as redis
from opentelemetry.trace import Tracer
from pydantic import ValidationError as PydanticValidationError

from tracenotes.exceptions import NotFoundError, StorageError
from tracenotes.schemas.note import Note
from tracenotes.storage.base import NoteStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "note:"


class RedisNoteStore(NoteStore):
    """
    Stores notes as JSON strings in Redis.

    The client's connection pool is shared by all requests; redis.asyncio
    clients are safe for concurrent use from one event loop.
    """

    db_system = "redis"

    def __init__(
        self,
        tracer: Tracer,
        client: redis.Redis,
        timeout: float = 5.0,
        ttl_seconds: int = 0,
    ):
        super().__init__(tracer, timeout)
        self._client = client
        self._ttl_seconds = ttl_seconds

    @classmethod
    def from_url(
        cls,
        url: str,
        tracer: Tracer,
        timeout: float = 5.0,
        ttl_seconds: int = 0,
    ) -> "RedisNoteStore":
        client = redis.from_url(url, decode_responses=True)
        return cls(tracer, client, timeout=timeout, ttl_seconds=ttl_seconds)

    @staticmethod
    def key_for(note_id: UUID) -> str:
        return f"{KEY_PREFIX}{note_id}"

    async def _store(self, note: Note) -> None:
        await self._client.set(
            self.key_for(note.note_id),
            note.model_dump_json(),
            ex=self._ttl_seconds or None,
        )

    async def _get(self, note_id: UUID) -> Note:
        raw = await self._client.get(self.key_for(note_id))
        if raw is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        try:
            return Note.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.error("Stored value for note %s is not a valid note: %s", note_id, exc)
            raise StorageError(
                context={
                    "operation": "get",
                    "note_id": str(note_id),
                    "original_error": "ValidationError",
                },
            ) from exc

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning("Health check: redis unreachable: %s", str(e))
            return False

    async def close(self) -> None:
        await self._client.aclose()
