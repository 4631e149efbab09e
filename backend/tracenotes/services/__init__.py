"""
TraceNotes Backend - Services Layer
====================================

What:  Request-handling logic sitting between routes (HTTP) and storage.

Service Inventory:
    - NoteService: CreateNote / GetNote, each inside its own span

Routes stay thin: they read the raw body or query string, extract the trace
context from headers, and hand both to the service.
"""
