"""
TraceNotes Backend - Note Entity and API Schemas
=================================================

What:  Pydantic models for the Note entity and the API contract.
How:   `Note` is the record exchanged between handlers and storage backends
       and is also the GET response body. The remaining models describe
       request bodies, small response envelopes, and the error payload.
Who:   Used by NoteService, every NoteStore implementation, and the routes.

Note JSON shape:
    {
        "note_id": "1b4e28ba-2fa1-4d3b-a3f5-ef19b5a7633b",
        "title": "groceries",
        "content": "milk, eggs",
        "created": "2024-01-15T12:00:00.123456Z"
    }
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Entity
# ══════════════════════════════════════════════════════════════════════════


class Note(BaseModel):
    """
    A persisted note.

    Invariants:
        - note_id is generated by the server (uuid4) and never client supplied
        - created is set once when the server accepts the note
        - instances are frozen; there is no update operation
    """

    note_id: uuid.UUID = Field(description="Server-generated unique identifier (UUID)")
    title: str = Field(description="Note title, arbitrary text")
    content: str = Field(description="Note body, arbitrary text")
    created: datetime = Field(description="When the server accepted the note (UTC ISO 8601)")

    model_config = ConfigDict(frozen=True, from_attributes=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    Body of POST /api/notes.

    Absent fields default to empty strings; values of the wrong JSON type
    (numbers, objects, null) are rejected.
    """

    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note body")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreatedResponse(BaseModel):
    """Returned by POST /api/notes once the note has been persisted."""

    note_id: uuid.UUID = Field(description="Identifier of the newly stored note")


class ReceiveResponse(BaseModel):
    """Echo payload returned by GET /api/receive."""

    message: str = Field(default="Hello from the receiver!")
    data: str = Field(description="Raw query string of the incoming request")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code ("input_error", "not_found", "server_error")
        message: Human-readable description
        details: Optional extra context (e.g. which field failed to parse)
        request_id: Correlation ID for finding this request in server logs
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and storage status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    storage_backend: str = Field(description="Configured storage backend")
    storage: str = Field(description="Storage connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
