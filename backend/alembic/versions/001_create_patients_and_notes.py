"""Create patients and notes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the normalized schema used by SqlNoteRepository:
       `patients` (one row per patient id) and `notes` (one row per note,
       foreign key to patients).
How:   Generic types only (Uuid, DateTime with time zone), so the same
       migration applies to PostgreSQL and to SQLite test databases.

Rollback: downgrade() drops both tables (destructive, all notes are lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=True),
            nullable=False,
            comment="Patient identifier shared by all notes of the patient",
        ),
        sa.Column(
            "name",
            sa.String(100),
            nullable=False,
            comment="Display name from the most recently saved note",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When the first note for this patient was saved (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "notes",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=True),
            nullable=False,
            comment="Unique note identifier (UUID4, generated by the service)",
        ),
        sa.Column("patient_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column(
            "type",
            sa.String(20),
            nullable=False,
            comment="initial, interim or discharge",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Free-text note body (10-5000 characters, enforced by the service)",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="Server-assigned creation time (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"]),
        sa.CheckConstraint(
            "type IN ('initial', 'interim', 'discharge')",
            name="ck_notes_type",
        ),
    )

    op.create_index(
        "idx_notes_created_at",
        "notes",
        [sa.text("created_at DESC")],
    )
    op.create_index(
        "idx_notes_patient_created_at",
        "notes",
        ["patient_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop both tables. Destructive: every stored note is lost."""
    op.drop_index("idx_notes_patient_created_at", table_name="notes")
    op.drop_index("idx_notes_created_at", table_name="notes")
    op.drop_table("notes")
    op.drop_table("patients")
