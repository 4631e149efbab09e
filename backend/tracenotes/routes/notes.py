"""
TraceNotes Backend - Notes Route Handlers
==========================================

What:  POST /api/notes (create) and GET /api/notes?note_id=<uuid> (fetch).
How:   Reads the raw body or query parameter, extracts the caller's trace
       context from headers, delegates to NoteService, returns JSON.

Input parsing happens inside NoteService (inside the span), so
the route declares the body as raw bytes and note_id as a plain string.
Malformed input therefore yields 400 from InputError rather than FastAPI's
automatic 422.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from opentelemetry.context import Context

from tracenotes.dependencies import get_note_service, get_trace_context
from tracenotes.schemas.note import ErrorResponse, Note, NoteCreatedResponse
from tracenotes.services.note_service import NoteService


router = APIRouter(prefix="/api", tags=["Notes"])


@router.post(
    "/notes",
    response_model=NoteCreatedResponse,
    responses={
        200: {"description": "Note stored", "model": NoteCreatedResponse},
        400: {"description": "Malformed request body", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Create a note",
    description=(
        "Stores a note built from a JSON body {title, content} and returns its "
        "server-generated identifier."
    ),
)
async def create_note(
    request: Request,
    ctx: Context = Depends(get_trace_context),
    service: NoteService = Depends(get_note_service),
) -> NoteCreatedResponse:
    body = await request.body()
    return await service.create_note(ctx, body)


@router.get(
    "/notes",
    response_model=Note,
    responses={
        200: {"description": "The stored note", "model": Note},
        400: {"description": "Malformed note_id", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Get a note by ID",
)
async def get_note(
    note_id: Optional[str] = Query(
        default=None,
        description="Note identifier (UUID, canonical string form)",
    ),
    ctx: Context = Depends(get_trace_context),
    service: NoteService = Depends(get_note_service),
) -> Note:
    """
    Return the full note.

    Error responses (handled by global exception handlers):
        HTTP 400: note_id missing or not a UUID (InputError)
        HTTP 404: no note with that id (NotFoundError)
        HTTP 500: storage backend failed (StorageError)
    """
    return await service.get_note(ctx, note_id)
