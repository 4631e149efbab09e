"""
TraceNotes Backend - Storage Port
==================================

What:  Abstract contract every persistence backend must satisfy.
How:   Public `store()` / `get()` take the caller's span-bearing context as
       their first argument, open a child span, bound the backend call by a
       timeout, and translate every backend failure into StorageError.
       Subclasses implement only `_store()` / `_get()`.
Who:   Consumed by NoteService; implemented by the memory, SQL, and Redis
       backends in this package.

Contract:
    store(ctx, note) -> None
        Persists the note keyed by note_id. Safe to call concurrently with
        other store/get calls. The note is retrievable once this returns.
    get(ctx, note_id) -> Note
        Exact key lookup. NotFoundError when nothing is stored under the id
        (or it is no longer retained).

Failure semantics:
    Any backend failure (connectivity, timeout, serialization, driver error)
    surfaces as StorageError. Causes are logged here and chained with
    `raise ... from`, but callers only branch on the error kind.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Optional, TypeVar
from uuid import UUID

from opentelemetry.context import Context
from opentelemetry.trace import SpanKind, Tracer

from tracenotes.exceptions import StorageError, TraceNotesError
from tracenotes.schemas.note import Note
from tracenotes.tracing import start_operation_span

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NoteStore(ABC):
    """
    Base class for note storage backends.

    Attributes:
        db_system: value of the `db.system` span attribute for this backend
    """

    db_system: str = "unknown"

    def __init__(self, tracer: Tracer, timeout: float = 5.0):
        self._tracer = tracer
        self._timeout = timeout

    # ── Public Port ───────────────────────────────────────────────────────

    async def store(self, ctx: Optional[Context], note: Note) -> None:
        with start_operation_span(
            self._tracer,
            "NoteStore.store",
            ctx,
            kind=SpanKind.CLIENT,
            attributes={"db.system": self.db_system, "note.id": str(note.note_id)},
        ):
            await self._guarded("store", note.note_id, self._store(note))

    async def get(self, ctx: Optional[Context], note_id: UUID) -> Note:
        with start_operation_span(
            self._tracer,
            "NoteStore.get",
            ctx,
            kind=SpanKind.CLIENT,
            attributes={"db.system": self.db_system, "note.id": str(note_id)},
        ):
            return await self._guarded("get", note_id, self._get(note_id))

    # ── Backend Hooks ─────────────────────────────────────────────────────

    @abstractmethod
    async def _store(self, note: Note) -> None:
        """Write `note`. Any exception is reported as StorageError."""
        ...

    @abstractmethod
    async def _get(self, note_id: UUID) -> Note:
        """Read a note or raise NotFoundError."""
        ...

    async def startup(self) -> None:
        """Called once from the app lifespan before serving requests."""

    async def health_check(self) -> bool:
        """Lightweight connectivity probe used by GET /health."""
        return True

    async def close(self) -> None:
        """Release connections; called on shutdown."""

    # ── Internals ─────────────────────────────────────────────────────────

    async def _guarded(self, operation: str, note_id: UUID, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except TraceNotesError:
            raise
        except asyncio.TimeoutError as exc:
            logger.error(
                "Storage %s timed out after %.1fs (note %s, backend %s)",
                operation, self._timeout, note_id, self.db_system,
            )
            raise StorageError(
                context={
                    "operation": operation,
                    "note_id": str(note_id),
                    "original_error": "TimeoutError",
                },
            ) from exc
        except Exception as exc:
            logger.error(
                "Storage %s failed (note %s, backend %s): %s",
                operation, note_id, self.db_system, exc,
            )
            raise StorageError(
                context={
                    "operation": operation,
                    "note_id": str(note_id),
                    "original_error": type(exc).__name__,
                },
            ) from exc
