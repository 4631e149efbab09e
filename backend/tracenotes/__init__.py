"""
TraceNotes Backend - Application Package
=========================================

What: A small note service (create a note, fetch it back by id) with
      OpenTelemetry spans around every request and storage call.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     NoteService (Request Handlers)  │  ← parse, span, storage, outcome
    ├─────────────────────────────────────┤
    │      Storage Port (NoteStore)       │  ← memory / SQL / Redis backends
    └─────────────────────────────────────┘
              ▲ tracer and span context are threaded through every layer
"""

__version__ = "1.0.0"
