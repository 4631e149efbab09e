"""
TraceNotes Backend - Request Logging Middleware
================================================

What:  One access-log line per HTTP request.
How:   Measures wall time around the downstream app and logs method, path,
       status, duration, request id, and the caller's trace id (taken from
       the inbound traceparent header, "-" when the caller started no trace).

Log levels follow the response status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies are never logged; note content stays out of the logs.
"""

import logging
import time

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tracenotes.middleware.request_id import request_id_var
from tracenotes.tracing import extract_context

logger = logging.getLogger("tracenotes.access")


def _caller_trace_id(request: Request) -> str:
    span_context = trace.get_current_span(extract_context(request.headers)).get_span_context()
    if not span_context.is_valid:
        return "-"
    return trace.format_trace_id(span_context.trace_id)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request on completion; /health probes are skipped."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")
        trace_id = _caller_trace_id(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] trace=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            trace_id,
            client_ip,
            extra={
                "request_id": rid,
                "trace_id": trace_id,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
