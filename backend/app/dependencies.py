"""
Patient Notes Backend — FastAPI Dependencies
=============================================

What:  Hands the NoteService built at startup to route handlers.
How:   The lifespan (app/main.py) stores the service on `app.state`;
       get_note_service() reads it back through the request.

Usage in a route:
    @router.get("/notes/all")
    async def all_notes(service: NoteService = Depends(get_note_service)):
        ...

Tests replace the repository by passing one to create_app(), or override
this dependency through `app.dependency_overrides`.
"""

from fastapi import Request

from app.services.note_service import NoteService


def get_note_service(request: Request) -> NoteService:
    """Return the application's NoteService."""
    return request.app.state.note_service
