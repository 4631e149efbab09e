"""
TraceNotes Backend - FastAPI Dependencies
==========================================

What:  Resolves per-request collaborators for the route handlers.
How:   The app factory stores the tracer, store, and NoteService on
       `app.state`; these functions read them back for each request, so
       tests can build an app with their own store and tracer.
"""

from fastapi import Request
from opentelemetry.context import Context
from opentelemetry.trace import Tracer

from tracenotes.services.note_service import NoteService
from tracenotes.tracing import extract_context


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service


def get_app_tracer(request: Request) -> Tracer:
    return request.app.state.tracer


def get_trace_context(request: Request) -> Context:
    """Parent trace context propagated by the caller (traceparent header)."""
    return extract_context(request.headers)
