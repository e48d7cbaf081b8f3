# Repositories package init
"""
Patient Notes Backend — Repositories Package
=============================================

What:  Persistence backends behind the NoteRepository interface.

Backend Inventory:
    - NoteRepository (abstract): save / find_by_patient_id / find_all / find_all_patients
    - InMemoryNoteRepository: lock-guarded dict, STORAGE_BACKEND=memory
    - SqlNoteRepository: patients + notes tables, STORAGE_BACKEND=postgres

create_note_repository() is the only place that knows which backend exists;
everything above it receives a NoteRepository instance.
"""

import logging

from app.config import Settings
from app.repositories.base import NoteRepository
from app.repositories.memory import InMemoryNoteRepository

logger = logging.getLogger(__name__)

__all__ = [
    "NoteRepository",
    "InMemoryNoteRepository",
    "create_note_repository",
]


def create_note_repository(settings: Settings) -> NoteRepository:
    """
    Build the repository selected by `settings.storage_backend`.

    The SQL backend is imported lazily so the in-memory mode needs no
    database driver at runtime.
    """
    if settings.storage_backend == "postgres":
        from app.repositories.sql import SqlNoteRepository

        logger.info(
            "Using PostgreSQL repository (%s:%d/%s)",
            settings.db_host,
            settings.db_port,
            settings.db_name,
        )
        return SqlNoteRepository.from_settings(settings)

    logger.info("Using in-memory repository")
    return InMemoryNoteRepository()
