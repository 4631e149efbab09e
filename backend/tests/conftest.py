"""
TraceNotes Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Spans are captured with the OpenTelemetry SDK's InMemorySpanExporter
       behind a SimpleSpanProcessor, so every finished span is available to
       assertions as soon as the operation returns.

Fixture Hierarchy (all function-scoped):
    ├── span_exporter: InMemorySpanExporter collecting finished spans
    ├── tracer: tracer from a provider wired to span_exporter
    ├── find_span: lookup helper returning the single finished span by name
    ├── memory_store: InMemoryNoteStore using `tracer`
    ├── failing_store: NoteStore whose backend always raises ConnectionError
    ├── sample_note: a ready-made Note
    ├── test_client: HTTPX AsyncClient over an app using memory_store
    └── failing_client: HTTPX AsyncClient over an app using failing_store
"""

import os
from datetime import datetime, timezone
from uuid import uuid4

# Override settings for testing BEFORE any application import
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["TRACE_EXPORTER"] = "none"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from tracenotes.main import create_app
from tracenotes.schemas.note import Note
from tracenotes.storage.base import NoteStore
from tracenotes.storage.memory_store import InMemoryNoteStore


class FailingNoteStore(NoteStore):
    """Backend that is always unreachable."""

    db_system = "failing"

    async def _store(self, note):
        raise ConnectionError("backend unreachable")

    async def _get(self, note_id):
        raise ConnectionError("backend unreachable")

    async def health_check(self) -> bool:
        return False


# ══════════════════════════════════════════════════════════════════════════
# Tracing Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter):
    """
    A tracer whose spans land in `span_exporter`.

    The provider is local to the test; nothing is installed globally.
    """
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider.get_tracer("tracenotes-tests")
    provider.shutdown()


@pytest.fixture
def find_span(span_exporter):
    """
    Returns a function that fetches the only finished span with a given name.

    Usage:
        span = find_span("CreateNote")
        assert [e.name for e in span.events] == ["parse body", ...]
    """

    def _find(name):
        matches = [s for s in span_exporter.get_finished_spans() if s.name == name]
        assert len(matches) == 1, f"expected one '{name}' span, found {len(matches)}"
        return matches[0]

    return _find


# ══════════════════════════════════════════════════════════════════════════
# Storage Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def memory_store(tracer):
    return InMemoryNoteStore(tracer)


@pytest.fixture
def failing_store(tracer):
    return FailingNoteStore(tracer)


@pytest.fixture
def sample_note():
    return Note(
        note_id=uuid4(),
        title="groceries",
        content="milk, eggs, bread",
        created=datetime.now(timezone.utc),
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(memory_store, tracer):
    """
    HTTPX AsyncClient talking to an app built around `memory_store`.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app(store=memory_store, tracer=tracer)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def failing_client(failing_store, tracer):
    app = create_app(store=failing_store, tracer=tracer)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
