"""
Patient Notes Backend — Application Package Initializer
=======================================================

What:  Marks the `app` directory as a Python package.
Who:   Imported by uvicorn (`app.main:app`), Alembic, pytest and the API client.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Use Cases + Rules)    │  ← validation, id resolution, ordering
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← in-memory or relational backend
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy tables + Pydantic entities
    └─────────────────────────────────────┘

    Routes receive a NoteService through FastAPI dependencies; the service
    receives its repository at construction time. Nothing below the routes
    knows about HTTP.
"""

__version__ = "1.0.0"
