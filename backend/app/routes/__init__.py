# Routes package init
"""
Patient Notes Backend — API Routes Package
===========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - notes.py:   POST /notes                  (create a note)
                  GET  /notes/all              (every note, newest first)
                  GET  /notes/patients/all     (distinct patients by name)
                  GET  /notes/{patientId}      (one patient's notes)
    - health.py:  GET  /health                 (liveness probe)

Design Principle:
    Routes are THIN: pull data out of the request, call NoteService, wrap the
    result in the `{success, data}` envelope. Business rules live in services.
"""
