"""
TraceNotes Backend - HTTP API Tests
====================================

What:  End-to-end tests of the HTTP surface through the ASGI app.
How:   HTTPX AsyncClient over ASGITransport (no server process); spans are
       inspected through the in-memory exporter from conftest.

Scenario covered:
    POST {title:"a", content:"b"}      → 200 {note_id: X}
    GET ?note_id=X                     → 200 {note_id:X, title:"a", content:"b", created}
    GET ?note_id=<unused valid uuid>   → 404
    GET ?note_id=not-a-valid-id        → 400
"""

import asyncio
from datetime import datetime
from uuid import UUID, uuid4

import pytest
from opentelemetry.trace import StatusCode

TRACEPARENT = "00-0af7651916cd43dd8448eb211c80319c-b7ad6b7169203331-01"


class TestNotesApi:

    @pytest.mark.asyncio
    async def test_create_and_fetch_scenario(self, test_client):
        response = await test_client.post("/api/notes", json={"title": "a", "content": "b"})
        assert response.status_code == 200
        note_id = response.json()["note_id"]
        UUID(note_id)

        response = await test_client.get("/api/notes", params={"note_id": note_id})
        assert response.status_code == 200
        body = response.json()
        assert body["note_id"] == note_id
        assert body["title"] == "a"
        assert body["content"] == "b"
        datetime.fromisoformat(body["created"].replace("Z", "+00:00"))

        response = await test_client.get("/api/notes", params={"note_id": str(uuid4())})
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

        response = await test_client.get("/api/notes", params={"note_id": "not-a-valid-id"})
        assert response.status_code == 400
        assert response.json()["error"] == "input_error"

    @pytest.mark.asyncio
    async def test_missing_note_id_is_bad_request(self, test_client):
        response = await test_client.get("/api/notes")

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "note_id"

    @pytest.mark.asyncio
    async def test_malformed_body_is_bad_request(self, test_client, memory_store):
        response = await test_client.post(
            "/api/notes",
            content=b"{title: a",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "input_error"
        assert body["details"]["field"] == "body"
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_concurrent_creates_return_distinct_ids(self, test_client):
        responses = await asyncio.gather(
            *(
                test_client.post("/api/notes", json={"title": str(i), "content": "x"})
                for i in range(20)
            )
        )

        assert all(r.status_code == 200 for r in responses)
        assert len({r.json()["note_id"] for r in responses}) == 20

    @pytest.mark.asyncio
    async def test_not_found_does_not_fail_span(self, test_client, find_span):
        response = await test_client.get("/api/notes", params={"note_id": str(uuid4())})

        assert response.status_code == 404
        assert find_span("GetNote").status.status_code == StatusCode.UNSET

    @pytest.mark.asyncio
    async def test_traceparent_header_is_honored(self, test_client, find_span):
        response = await test_client.post(
            "/api/notes",
            json={"title": "a", "content": "b"},
            headers={"traceparent": TRACEPARENT},
        )

        assert response.status_code == 200
        span = find_span("CreateNote")
        assert format(span.context.trace_id, "032x") == "0af7651916cd43dd8448eb211c80319c"
        assert format(span.parent.span_id, "016x") == "b7ad6b7169203331"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get(
            "/api/notes",
            params={"note_id": "bad"},
            headers={"X-Request-ID": "abc12345"},
        )

        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.json()["request_id"] == "abc12345"


class TestStorageFailureApi:

    @pytest.mark.asyncio
    async def test_create_storage_failure_is_server_error(self, failing_client, find_span):
        response = await failing_client.post("/api/notes", json={"title": "a", "content": "b"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "note_id" not in body
        assert find_span("CreateNote").status.status_code == StatusCode.ERROR

    @pytest.mark.asyncio
    async def test_get_storage_failure_is_server_error(self, failing_client, find_span):
        response = await failing_client.get("/api/notes", params={"note_id": str(uuid4())})

        assert response.status_code == 500
        assert find_span("GetNote").status.status_code == StatusCode.ERROR

    @pytest.mark.asyncio
    async def test_health_reports_unreachable_storage(self, failing_client):
        response = await failing_client.get("/health")

        assert response.status_code == 503
        assert response.json()["storage"] == "disconnected"


class TestReceiveApi:

    @pytest.mark.asyncio
    async def test_echoes_query_string(self, test_client, find_span):
        response = await test_client.get("/api/receive?user=42&mode=test")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Hello from the receiver!",
            "data": "user=42&mode=test",
        }
        span = find_span("ReceiveRequest")
        assert [e.name for e in span.events] == ["write response"]

    @pytest.mark.asyncio
    async def test_uses_injected_tracer(self, test_client, span_exporter):
        await test_client.get("/api/receive", headers={"traceparent": TRACEPARENT})

        names = [s.name for s in span_exporter.get_finished_spans()]
        assert names == ["ReceiveRequest"]


class TestHealthApi:

    @pytest.mark.asyncio
    async def test_healthy_with_memory_store(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["storage_backend"] == "memory"
