"""
TraceNotes Backend - Receiver Route
====================================

What:  GET /api/receive echoes the request's query string back as JSON.
How:   Opens a ReceiveRequest span with the same injected tracer the note
       handlers use, so the span joins the caller's trace like every other
       operation.
Who:   Used by downstream services and smoke tests to check trace
       propagation end to end.
"""

from fastapi import APIRouter, Depends, Request
from opentelemetry.context import Context
from opentelemetry.trace import SpanKind, Tracer

from tracenotes.dependencies import get_app_tracer, get_trace_context
from tracenotes.schemas.note import ReceiveResponse
from tracenotes.tracing import start_operation_span

router = APIRouter(prefix="/api", tags=["Receiver"])


@router.get(
    "/receive",
    response_model=ReceiveResponse,
    summary="Echo the query string",
)
async def receive_request(
    request: Request,
    ctx: Context = Depends(get_trace_context),
    tracer: Tracer = Depends(get_app_tracer),
) -> ReceiveResponse:
    with start_operation_span(tracer, "ReceiveRequest", ctx, kind=SpanKind.SERVER) as (_, span):
        span.add_event("write response")
        return ReceiveResponse(data=request.url.query)
