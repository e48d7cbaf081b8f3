"""
Patient Notes Backend — SQLAlchemy Tables
==========================================

What:  ORM models for the normalized relational schema: `patients` and `notes`.
Who:   Used by SqlNoteRepository for reads/writes and by Alembic for migrations.

Table Design:
    patients(id, name, created_at)
        One row per patient id. `name` is overwritten by every save
        (upsert), so it always holds the most recently submitted name.
        This table is the source of truth for GET /notes/patients/all.

    notes(id, patient_id → patients.id, type, content, created_at)
        One immutable row per note. The patient name is NOT duplicated here;
        reads join against `patients`.

    UUID columns use the generic `Uuid` type: native UUID on PostgreSQL,
    CHAR(32) on SQLite (tests).

    Indexes:
        idx_notes_created_at          ORDER BY created_at DESC (all notes)
        idx_notes_patient_created_at  WHERE patient_id = ? ORDER BY created_at DESC
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.schemas.note import PATIENT_NAME_MAX, NoteType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PatientRecord(Base):
    """A patient row, created implicitly by the first note saved for its id."""

    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        comment="Patient identifier shared by all notes of the patient",
    )

    name: Mapped[str] = mapped_column(
        String(PATIENT_NAME_MAX),
        nullable=False,
        comment="Display name from the most recently saved note",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="When the first note for this patient was saved (UTC)",
    )

    notes: Mapped[List["NoteRecord"]] = relationship(back_populates="patient")

    def __repr__(self) -> str:
        return f"<PatientRecord(id={self.id})>"


class NoteRecord(Base):
    """
    A stored note.

    Query Patterns:
        - Notes for a patient: WHERE patient_id = :id ORDER BY created_at DESC
          → idx_notes_patient_created_at
        - All notes: ORDER BY created_at DESC → idx_notes_created_at
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        comment="Unique note identifier (UUID4, generated by the service)",
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("patients.id"),
        nullable=False,
    )

    # VARCHAR + CHECK constraint, not a native ENUM type
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="initial, interim or discharge",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Free-text note body (10-5000 characters, enforced by the service)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Server-assigned creation time (UTC)",
    )

    patient: Mapped[PatientRecord] = relationship(back_populates="notes")

    __table_args__ = (
        CheckConstraint(
            "type IN (" + ", ".join(f"'{t.value}'" for t in NoteType) + ")",
            name="ck_notes_type",
        ),
        Index("idx_notes_created_at", created_at.desc()),
        Index("idx_notes_patient_created_at", patient_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<NoteRecord(id={self.id}, patient_id={self.patient_id}, "
            f"type='{self.type}', created_at='{self.created_at}')>"
        )
