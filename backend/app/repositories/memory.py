"""
Patient Notes Backend — In-Memory Note Repository
==================================================

What:  Process-local repository for development and tests.
How:   A dict mapping patient id → list of notes in insertion order,
       owned by the repository instance and guarded by one lock.
When:  STORAGE_BACKEND=memory (the default). Data is lost on restart.

Thread Safety:
    Every read and write takes `self._lock`. The critical sections contain no
    `await`, so a plain threading.Lock serializes access from the event loop
    and from any worker threads alike without blocking across suspensions.
"""

import logging
import threading
import uuid
from typing import Dict, List

from app.repositories.base import NoteRepository
from app.schemas.note import Note, Patient

logger = logging.getLogger(__name__)


class InMemoryNoteRepository(NoteRepository):
    """
    NoteRepository backed by a lock-guarded dict.

    Patient names: find_all_patients() reports the name of the LAST note
    saved for each patient, so renaming a patient on a later note wins.
    """

    def __init__(self) -> None:
        self._notes: Dict[uuid.UUID, List[Note]] = {}
        self._lock = threading.Lock()

    async def save(self, note: Note) -> None:
        with self._lock:
            self._notes.setdefault(note.patient_id, []).append(note)
        logger.debug("Stored note %s for patient %s in memory", note.id, note.patient_id)

    async def find_by_patient_id(self, patient_id: uuid.UUID) -> List[Note]:
        with self._lock:
            # Copy so callers can sort without touching the stored sequence
            return list(self._notes.get(patient_id, ()))

    async def find_all(self) -> List[Note]:
        with self._lock:
            notes = [note for seq in self._notes.values() for note in seq]
        # Stable sort: equal timestamps keep insertion order
        return sorted(notes, key=lambda n: n.created_at, reverse=True)

    async def find_all_patients(self) -> List[Patient]:
        with self._lock:
            patients = [
                Patient(id=patient_id, name=seq[-1].patient_name)
                for patient_id, seq in self._notes.items()
                if seq
            ]
        return sorted(patients, key=lambda p: (p.name, str(p.id)))

    def clear(self) -> None:
        """Drop every stored note (test helper)."""
        with self._lock:
            self._notes.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(seq) for seq in self._notes.values())
