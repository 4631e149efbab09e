# Routes package init
"""
TraceNotes Backend - API Routes Package
========================================

Route Inventory:
    - notes.py:    POST /api/notes               (create a note)
                   GET  /api/notes?note_id=<id>  (get a single note)
    - receive.py:  GET  /api/receive             (echo query string)
    - health.py:   GET  /health                  (service health check)

Routes stay thin: extract input and trace context, call the service,
let the global exception handlers format errors.
"""
