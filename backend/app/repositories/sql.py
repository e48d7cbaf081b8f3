"""
Patient Notes Backend — Relational Note Repository
===================================================

What:  NoteRepository over the normalized `patients` + `notes` tables.
How:   Async SQLAlchemy sessions. save() runs the patient upsert and the note
       insert inside ONE transaction; reads join notes to patients.
Who:   Built by create_note_repository() when STORAGE_BACKEND=postgres;
       tests run it against sqlite+aiosqlite.

Write path (save):
    BEGIN
      INSERT INTO patients (id, name, created_at) VALUES (...)
        ON CONFLICT (id) DO UPDATE SET name = excluded.name
      INSERT INTO notes (id, patient_id, type, content, created_at) VALUES (...)
    COMMIT            -- or ROLLBACK on any error: no orphan patient, no orphan note

Read path:
    find_by_patient_id / find_all   notes JOIN patients ORDER BY created_at DESC
    find_all_patients               patients ORDER BY name ASC

Consistency:
    `patients` is authoritative for the patient list. Because the name lives
    only there, notes read back carry the patient's current name.

Error Handling:
    Every SQLAlchemyError is logged with context and re-raised as
    PersistenceError. Nothing is retried.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import Settings
from app.database import (
    build_engine,
    build_session_factory,
    create_schema,
    dispose_engine,
)
from app.exceptions import PersistenceError
from app.models.note import NoteRecord, PatientRecord
from app.repositories.base import NoteRepository
from app.schemas.note import Note, NoteType, Patient

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE support
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlNoteRepository(NoteRepository):
    """
    Relational NoteRepository (normalized two-table design).

    Owns its AsyncEngine: close() disposes the connection pool.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        dialect = engine.dialect.name
        if dialect not in _UPSERT_INSERTS:
            raise ValueError(f"Unsupported database dialect for notes storage: {dialect}")
        self._insert = _UPSERT_INSERTS[dialect]

    @classmethod
    def from_settings(cls, settings: Settings, url: Optional[str] = None) -> "SqlNoteRepository":
        """Build the engine from configuration and wrap it."""
        return cls(build_engine(settings, url=url))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_schema(self) -> None:
        """Create the tables if missing (tests and DB_CREATE_SCHEMA=true)."""
        await create_schema(self._engine)

    async def close(self) -> None:
        await dispose_engine(self._engine)

    # ── Writes ────────────────────────────────────────────────────────────

    async def save(self, note: Note) -> None:
        upsert = self._insert(PatientRecord).values(
            id=note.patient_id,
            name=note.patient_name,
            created_at=note.created_at,
        )
        upsert = upsert.on_conflict_do_update(
            index_elements=[PatientRecord.id],
            set_={"name": upsert.excluded.name},
        )

        try:
            async with self._session_factory() as session:
                # session.begin() commits on exit and rolls back on any exception
                async with session.begin():
                    await session.execute(upsert)
                    session.add(
                        NoteRecord(
                            id=note.id,
                            patient_id=note.patient_id,
                            type=note.type.value,
                            content=note.content,
                            created_at=note.created_at,
                        )
                    )
        except SQLAlchemyError as e:
            logger.error(
                "Failed to save note %s for patient %s: %s",
                note.id,
                note.patient_id,
                type(e).__name__,
                exc_info=True,
            )
            raise PersistenceError(
                message="Could not save the note. Please try again.",
                context={"note_id": str(note.id), "original_error": type(e).__name__},
            ) from e

        logger.debug("Stored note %s for patient %s", note.id, note.patient_id)

    # ── Reads ─────────────────────────────────────────────────────────────

    def _notes_query(self):
        return (
            select(
                NoteRecord.id,
                NoteRecord.patient_id,
                PatientRecord.name,
                NoteRecord.type,
                NoteRecord.content,
                NoteRecord.created_at,
            )
            .join(PatientRecord, NoteRecord.patient_id == PatientRecord.id)
            .order_by(NoteRecord.created_at.desc())
        )

    @staticmethod
    def _to_note(row) -> Note:
        return Note(
            id=row.id,
            patient_id=row.patient_id,
            patient_name=row.name,
            type=NoteType(row.type),
            content=row.content,
            created_at=_as_utc(row.created_at),
        )

    async def find_by_patient_id(self, patient_id: uuid.UUID) -> List[Note]:
        query = self._notes_query().where(NoteRecord.patient_id == patient_id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error fetching notes for patient %s: %s", patient_id, str(e))
            raise PersistenceError(
                message="Could not retrieve notes. Please try again.",
                context={"patient_id": str(patient_id), "original_error": type(e).__name__},
            ) from e
        return [self._to_note(row) for row in rows]

    async def find_all(self) -> List[Note]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(self._notes_query())
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve notes. Please try again.",
                context={"original_error": type(e).__name__},
            ) from e
        return [self._to_note(row) for row in rows]

    async def find_all_patients(self) -> List[Patient]:
        query = select(PatientRecord.id, PatientRecord.name).order_by(
            PatientRecord.name.asc(), PatientRecord.id.asc()
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing patients: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve patients. Please try again.",
                context={"original_error": type(e).__name__},
            ) from e
        return [Patient(id=row.id, name=row.name) for row in rows]
