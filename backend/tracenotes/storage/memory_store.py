"""
In-process storage backend.

Notes live in a dict guarded by an asyncio.Lock. Used as the default
backend for local development and as the store behind the HTTP tests.
Contents are lost when the process exits.
"""

import asyncio
from typing import Dict
from uuid import UUID

from opentelemetry.trace import Tracer

from tracenotes.exceptions import NotFoundError
from tracenotes.schemas.note import Note
from tracenotes.storage.base import NoteStore


class InMemoryNoteStore(NoteStore):
    db_system = "memory"

    def __init__(self, tracer: Tracer, timeout: float = 5.0):
        super().__init__(tracer, timeout)
        self._notes: Dict[UUID, Note] = {}
        self._lock = asyncio.Lock()

    async def _store(self, note: Note) -> None:
        async with self._lock:
            self._notes[note.note_id] = note

    async def _get(self, note_id: UUID) -> Note:
        async with self._lock:
            note = self._notes.get(note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    def __len__(self) -> int:
        return len(self._notes)
