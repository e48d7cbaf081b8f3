# Middleware package init
"""
Patient Notes Backend — Middleware Package
===========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation id
    2. Logging: records status and duration once the response exists
    3. GZip / CORS: FastAPI-provided, registered in main.create_app()
"""
