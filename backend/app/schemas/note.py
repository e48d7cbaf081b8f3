"""
Patient Notes Backend — Pydantic Entities and API Schemas
==========================================================

What:  The note domain entity, the validated creation payload, the patient
       summary, and the JSON envelopes the API returns.
How:   Pydantic v2 models. Python attributes are snake_case; JSON uses the
       camelCase names the client expects (patientId, patientName, createdAt)
       through an alias generator.
Who:   NoteService builds Note instances; repositories store and return them;
       routes serialize them inside the response envelopes.

Design Decision:
    Schemas are separate from the SQLAlchemy tables (app/models/note.py):
    the relational backend stores the patient name in `patients`, while a
    Note always carries it. Repositories translate between the two.
"""

import enum
import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Length bounds shared by validation, the ORM columns and the client form check
PATIENT_NAME_MIN = 1
PATIENT_NAME_MAX = 100
CONTENT_MIN = 10
CONTENT_MAX = 5000


class NoteType(str, enum.Enum):
    """Closed set of note kinds, in the order they occur during a stay."""

    INITIAL = "initial"
    INTERIM = "interim"
    DISCHARGE = "discharge"


_camel_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


# ══════════════════════════════════════════════════════════════════════════
# Domain Entities
# ══════════════════════════════════════════════════════════════════════════


class Note(BaseModel):
    """
    An immutable clinical note.

    Lifecycle:
        1. Built by NoteService.create_note with a fresh UUID4 id and the
           current UTC time
        2. Saved once through NoteRepository.save
        3. Never updated or deleted (the model is frozen)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: uuid.UUID = Field(description="Unique note identifier (UUID4)")
    patient_id: uuid.UUID = Field(description="Identifier shared by all notes of a patient")
    patient_name: str = Field(description="Patient display name carried by this note")
    type: NoteType = Field(description="initial, interim or discharge")
    content: str = Field(description="Free-text note body")
    created_at: datetime = Field(description="Server-assigned creation time (UTC)")


class Patient(BaseModel):
    """Derived patient entry: one per distinct patient id."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str


class NoteCreate(BaseModel):
    """
    Validated note-creation payload produced by validate_create_note().

    patient_id stays None when the caller omitted it; NoteService decides
    whether one may be generated.
    """

    model_config = ConfigDict(frozen=True)

    patient_id: Optional[uuid.UUID] = None
    patient_name: str
    type: NoteType
    content: str


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """`{"success": true, "data": ...}` wrapper used by every notes endpoint."""

    success: bool = True
    data: T


class ErrorDetail(BaseModel):
    """One field-level violation inside an error response."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "success": false,
            "error": "Validation failed",
            "details": [{"field": "content", "message": "Content must be at least 10 characters"}],
            "requestId": "1f2e3d4c"
        }
    """

    model_config = _camel_config

    success: bool = False
    error: str = Field(description="Human-readable error description")
    details: Optional[List[ErrorDetail]] = Field(default=None)
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Liveness probe body returned by GET /health."""

    status: str = Field(description="Always 'ok' when the process answers")
    timestamp: datetime = Field(description="Server time (UTC)")
    version: str = Field(description="Application version")
    storage: str = Field(description="Configured storage backend: memory or postgres")
