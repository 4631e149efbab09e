"""
TraceNotes Backend - Tracing Setup and Span Protocol
=====================================================

What:  Builds the OpenTelemetry tracer the app injects into every handler,
       and the helpers that give each operation the same span shape.
How:   `build_tracer_provider()` creates an SDK TracerProvider with a
       `service.name` resource and the configured exporter. The provider is
       NOT installed as the global provider; its tracer is passed explicitly
       to NoteService and the storage backends.
Who:   Used by the app factory (setup/shutdown), NoteService, and stores.

Span protocol (every public operation):
    1. start_operation_span() derives a child span from the caller's context
       and yields the span-bearing context for downstream calls
    2. the span is ended exactly once, whatever exit path is taken
    3. add_event() markers: before parsing input, before calling storage,
       before writing the response
    4. errors are classified by ErrorKind: InputError and NotFoundError leave
       the span status untouched; StorageError and unexpected exceptions are
       recorded with StatusCode.ERROR
    5. the yielded context, not the inbound one, is passed to storage calls

Lifecycle:
    Started → (events)* → (optionally marked failed) → Ended
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Mapping, Optional, Tuple

from opentelemetry import propagate, trace
from opentelemetry.context import Context
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer

from tracenotes import __version__
from tracenotes.config import Settings
from tracenotes.exceptions import TraceNotesError

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "tracenotes"


# ══════════════════════════════════════════════════════════════════════════
# Provider Setup
# ══════════════════════════════════════════════════════════════════════════


def _build_exporter(settings: Settings) -> Optional[SpanExporter]:
    if settings.trace_exporter == "console":
        return ConsoleSpanExporter()
    if settings.trace_exporter == "otlp":
        # Imported lazily: the OTLP exporter pulls in protobuf and requests
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(endpoint=settings.otlp_endpoint)
    return None


def build_tracer_provider(settings: Settings) -> TracerProvider:
    """
    Create the TracerProvider for this process.

    With trace_exporter=none the provider has no span processor: spans are
    still created (handlers and tests behave identically) but never exported.
    """
    resource = Resource.create(
        {
            SERVICE_NAME: settings.service_name,
            SERVICE_VERSION: __version__,
        }
    )
    provider = TracerProvider(resource=resource)

    exporter = _build_exporter(settings)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info("Tracing enabled: exporter=%s", settings.trace_exporter)
    else:
        logger.info("Tracing exporter disabled; spans are not exported")

    return provider


def get_tracer(provider: trace.TracerProvider) -> Tracer:
    """The single tracer shared by every operation of the app."""
    return provider.get_tracer(INSTRUMENTATION_NAME, __version__)


# ══════════════════════════════════════════════════════════════════════════
# Context Propagation
# ══════════════════════════════════════════════════════════════════════════


def extract_context(carrier: Mapping[str, str]) -> Context:
    """
    Build the parent context from inbound request headers.

    Uses the configured text-map propagator (W3C traceparent/baggage by
    default). Without a traceparent header the returned context has no
    span and operations start a new trace.
    """
    return propagate.extract(carrier)


def format_trace_id(span: Span) -> str:
    """Hex trace id of `span`, as shown by tracing backends."""
    return trace.format_trace_id(span.get_span_context().trace_id)


# ══════════════════════════════════════════════════════════════════════════
# Span Protocol
# ══════════════════════════════════════════════════════════════════════════


def record_failure(span: Span, exc: BaseException) -> None:
    """Mark `span` as failed and attach the exception as a span event."""
    kind = getattr(exc, "kind", None)
    error_kind = kind.value if kind is not None else "unexpected"
    span.record_exception(exc, attributes={"error.kind": error_kind})
    span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))


@contextmanager
def start_operation_span(
    tracer: Tracer,
    name: str,
    parent_ctx: Optional[Context] = None,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, str]] = None,
) -> Iterator[Tuple[Context, Span]]:
    """
    Run one operation inside a child span of `parent_ctx`.

    Yields `(ctx, span)`: `ctx` carries `span` and must be handed to every
    downstream call. Exceptions propagate unchanged after classification;
    asyncio cancellation is not recorded as a failure but still ends the span.

    Example:
        with start_operation_span(tracer, "GetNote", parent_ctx) as (ctx, span):
            span.add_event("call storage")
            note = await store.get(ctx, note_id)
    """
    span = tracer.start_span(name, context=parent_ctx, kind=kind, attributes=attributes)
    ctx = trace.set_span_in_context(span, parent_ctx)
    try:
        yield ctx, span
    except TraceNotesError as exc:
        if exc.kind.is_span_failure:
            record_failure(span, exc)
        raise
    except Exception as exc:
        record_failure(span, exc)
        raise
    finally:
        span.end()
