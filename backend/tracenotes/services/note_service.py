"""
TraceNotes Backend - Note Service (Request Handlers)
=====================================================

What:  The two note operations, CreateNote and GetNote, each wrapped in its
       own span.
How:   Parses raw request input, calls the Storage Port with the span-bearing
       context, and returns response models. Errors propagate as tagged
       TraceNotesError variants; the span helper decides from the tag whether
       the span is marked failed.
Who:   Called by the route handlers in routes/notes.py.
When:  Once per POST /api/notes and GET /api/notes request.

CreateNote:
    start span → "parse body" → parse JSON (InputError → 400, no storage call)
    → new uuid4 + created=now (UTC) → "call storage" → store
    (StorageError → span failed, 500) → "write note_id" → {note_id}

GetNote:
    start span → "parse note_id" → parse UUID (InputError → 400, no storage call)
    → "call storage" → get (NotFoundError → 404, span NOT failed;
    StorageError → span failed, 500) → "write note" → full note

Design Decision:
    NoteService holds only its injected dependencies (store, tracer). Every
    call is a single pass with no retained state and no retries.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from opentelemetry.context import Context
from opentelemetry.trace import SpanKind, Tracer
from pydantic import ValidationError as PydanticValidationError

from tracenotes.exceptions import InputError
from tracenotes.schemas.note import Note, NoteCreate, NoteCreatedResponse
from tracenotes.storage.base import NoteStore
from tracenotes.tracing import format_trace_id, start_operation_span

logger = logging.getLogger(__name__)


class NoteService:
    """
    Request handlers for note creation and retrieval.

    Args:
        store:  Storage Port implementation (shared, concurrency-safe)
        tracer: The app's single tracer; never looked up from global state
    """

    def __init__(self, store: NoteStore, tracer: Tracer):
        self._store = store
        self._tracer = tracer

    async def create_note(self, ctx: Optional[Context], body: bytes) -> NoteCreatedResponse:
        """
        Persist a new note built from a raw JSON request body.

        Args:
            ctx:  Inbound trace context (parent of the CreateNote span)
            body: Raw request body, expected to be {"title": str, "content": str}

        Returns:
            NoteCreatedResponse carrying the generated note_id.

        Raises:
            InputError: body is not JSON or does not match the expected shape
            StorageError: the backend failed; no identifier is exposed
        """
        with start_operation_span(self._tracer, "CreateNote", ctx, kind=SpanKind.SERVER) as (
            span_ctx,
            span,
        ):
            span.add_event("parse body")
            payload = self._parse_body(body)

            note = Note(
                note_id=uuid4(),
                title=payload.title,
                content=payload.content,
                created=datetime.now(timezone.utc),
            )
            span.set_attribute("note.id", str(note.note_id))

            span.add_event("call storage")
            await self._store.store(span_ctx, note)

            span.add_event("write note_id")
            logger.info("Note %s created (trace %s)", note.note_id, format_trace_id(span))
            return NoteCreatedResponse(note_id=note.note_id)

    async def get_note(self, ctx: Optional[Context], raw_note_id: Optional[str]) -> Note:
        """
        Fetch a note by the textual identifier given in the request.

        Raises:
            InputError: missing or non-UUID identifier
            NotFoundError: no note stored under the identifier
            StorageError: the backend failed
        """
        with start_operation_span(self._tracer, "GetNote", ctx, kind=SpanKind.SERVER) as (
            span_ctx,
            span,
        ):
            span.add_event("parse note_id")
            note_id = self._parse_note_id(raw_note_id)
            span.set_attribute("note.id", str(note_id))

            span.add_event("call storage")
            note = await self._store.get(span_ctx, note_id)

            span.add_event("write note")
            return note

    # ── Input Parsing ─────────────────────────────────────────────────────

    @staticmethod
    def _parse_body(body: bytes) -> NoteCreate:
        try:
            return NoteCreate.model_validate_json(body)
        except PydanticValidationError as exc:
            raise InputError(
                message="Request body must be a JSON object with string fields 'title' and 'content'",
                field="body",
                context={
                    "errors": [
                        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
                        for err in exc.errors()
                    ],
                },
            ) from exc

    @staticmethod
    def _parse_note_id(raw_note_id: Optional[str]) -> UUID:
        if not raw_note_id:
            raise InputError(message="note_id query parameter is required", field="note_id")
        try:
            return UUID(raw_note_id)
        except ValueError as exc:
            raise InputError(
                message=f"note_id '{raw_note_id}' is not a valid UUID",
                field="note_id",
            ) from exc
