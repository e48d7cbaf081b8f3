"""
Patient Notes Backend — Note Repository Interface
==================================================

What:  Abstract base class defining the persistence capability set.
How:   Concrete backends (InMemoryNoteRepository, SqlNoteRepository) implement
       the four operations; create_note_repository() picks one from config.
       This is the Strategy pattern: NoteService only sees this interface.
Who:   Implemented by app.repositories.memory and app.repositories.sql;
       called by NoteService.
"""

import uuid
from abc import ABC, abstractmethod
from typing import List

from app.schemas.note import Note, Patient


class NoteRepository(ABC):
    """
    Persistence contract for notes.

    Contract:
        - save() is durable when it returns; it either stores the note (and
          its patient) completely or raises PersistenceError with nothing
          visible
        - Lookups never raise for unknown ids; they return empty lists
        - Returned Note objects compare equal to the ones that were saved
    """

    @abstractmethod
    async def save(self, note: Note) -> None:
        """Store a new note; the patient entry is created or renamed as a side effect."""
        ...

    @abstractmethod
    async def find_by_patient_id(self, patient_id: uuid.UUID) -> List[Note]:
        """
        All notes for one patient.

        Order is backend-specific (insertion order in memory, newest first
        in SQL); NoteService applies the final ordering.
        """
        ...

    @abstractmethod
    async def find_all(self) -> List[Note]:
        """Every note across all patients, newest first."""
        ...

    @abstractmethod
    async def find_all_patients(self) -> List[Patient]:
        """One entry per distinct patient id, ordered by name ascending."""
        ...

    async def close(self) -> None:
        """Release backend resources. No-op unless the backend holds connections."""
        return None
