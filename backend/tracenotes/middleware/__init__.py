# Middleware package init
"""
TraceNotes Backend - Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: sets the correlation ID used by every later log line
    2. Logging: logs method, path, status, duration with request and trace ids
    3. CORS: FastAPI's CORSMiddleware (handles preflight)

Spans are not created here; each operation opens its own span from the
propagated context (see tracenotes.tracing).
"""
