"""
Patient Notes Backend — Note Service (Use Cases)
=================================================

What:  The four use cases of the system, as methods of one service:
           create_note       CreateNote
           get_notes         GetNotes
           get_all_notes     GetAllNotes
           get_all_patients  GetAllPatients
How:   Validate input → resolve identifiers → call the repository → order.
Who:   Called by route handlers; calls validation and the NoteRepository.

Orchestration Flow (POST /notes):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │  Route   │───▶│  Validate   │───▶│ Resolve ids  │───▶│  Save    │
    │          │    │  (pure)     │    │  + timestamp │    │  (repo)  │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    On failure at any step the exception propagates unchanged:
    ValidationError / MissingPatientIdError → 400, PersistenceError → 500.

Design Decision:
    NoteService holds no state between calls; it only keeps references to
    its collaborators (repository, clock, id factory), injected at
    construction. The "generate a patient id for initial notes, require
    one otherwise" rule lives here and nowhere else.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping

from app.exceptions import MissingPatientIdError
from app.repositories.base import NoteRepository
from app.schemas.note import Note, NoteType, Patient
from app.services.validation import validate_create_note, validate_patient_id

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(notes: List[Note]) -> List[Note]:
    # sorted() is stable with reverse=True, so equal timestamps keep their order
    return sorted(notes, key=lambda n: n.created_at, reverse=True)


class NoteService:
    """
    Business logic layer for note operations.

    Args:
        repository: Storage backend (in-memory or relational)
        clock:      Returns the current UTC time; tests inject a fixed sequence
        id_factory: Returns fresh UUIDs for notes and generated patient ids
    """

    def __init__(
        self,
        repository: NoteRepository,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self.repository = repository
        self._clock = clock
        self._new_id = id_factory

    async def create_note(self, raw: Mapping[str, Any]) -> Note:
        """
        Create and persist a note.

        Workflow Steps:
            1. Validate raw fields (ValidationError on failure)
            2. Resolve patient id: generate one for an `initial` note without
               it, otherwise raise MissingPatientIdError
            3. Build the immutable Note with a fresh id and the current time
            4. Save through the repository (one write, durable on return)
            5. Return the saved note

        Args:
            raw: patientId (optional), patientName, type, content

        Raises:
            ValidationError: input is malformed
            MissingPatientIdError: non-initial note without patient id
            PersistenceError: the repository failed
        """
        payload = validate_create_note(raw)

        patient_id = payload.patient_id
        if patient_id is None:
            if payload.type is not NoteType.INITIAL:
                raise MissingPatientIdError(note_type=payload.type.value)
            patient_id = self._new_id()
            logger.info("Generated patient id %s for initial note", patient_id)

        note = Note(
            id=self._new_id(),
            patient_id=patient_id,
            patient_name=payload.patient_name,
            type=payload.type,
            content=payload.content,
            created_at=self._clock(),
        )

        await self.repository.save(note)
        logger.info(
            "Created %s note %s for patient %s", note.type.value, note.id, note.patient_id
        )
        return note

    async def get_notes(self, patient_id: Any) -> List[Note]:
        """
        Notes of one patient, newest first.

        Raises:
            ValidationError: patient_id is not a well-formed UUID
        """
        pid = validate_patient_id(patient_id)
        notes = await self.repository.find_by_patient_id(pid)
        return _newest_first(notes)

    async def get_all_notes(self) -> List[Note]:
        """Every note across all patients, newest first."""
        notes = await self.repository.find_all()
        return _newest_first(notes)

    async def get_all_patients(self) -> List[Patient]:
        """
        Distinct patients ordered by name.

        Ordering is plain case-sensitive code-point comparison ("Zoe" sorts
        before "adam"), ties broken by id. The repository result is re-sorted
        so PostgreSQL collation settings do not change the order.
        """
        patients = await self.repository.find_all_patients()
        return sorted(patients, key=lambda p: (p.name, str(p.id)))
