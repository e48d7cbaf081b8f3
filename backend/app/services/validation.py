"""
Patient Notes Backend — Note Input Validation
==============================================

What:  Turns raw request fields into a typed NoteCreate, or raises a
       ValidationError listing every field that is wrong.
How:   A Pydantic model with length/enum constraints does the checking;
       its error list is translated into `{field, message}` entries with
       stable, human-readable messages.
Who:   Called by NoteService before any repository access.

Validation is pure: no I/O, no clock, no id generation.

Rules:
    patientId    optional; when present must be a canonical UUID
                 (8-4-4-4-12 hex digits, any case). Blank means absent.
    patientName  1..100 characters
    type         initial | interim | discharge
    content      10..5000 characters
"""

import re
import uuid
from typing import Any, Dict, List, Mapping, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.exceptions import ValidationError
from app.schemas.note import (
    CONTENT_MAX,
    CONTENT_MIN,
    PATIENT_NAME_MAX,
    PATIENT_NAME_MIN,
    NoteCreate,
    NoteType,
)

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

INVALID_PATIENT_ID = "Invalid patient ID format"

# (field, pydantic error type) → message returned to the client
_MESSAGES = {
    ("patientName", "missing"): "Patient name is required",
    ("patientName", "string_too_short"): "Patient name is required",
    ("patientName", "string_too_long"): (
        f"Patient name must not exceed {PATIENT_NAME_MAX} characters"
    ),
    ("type", "missing"): "Type is required",
    ("type", "enum"): "Type must be initial, interim, or discharge",
    ("content", "missing"): "Content is required",
    ("content", "string_too_short"): f"Content must be at least {CONTENT_MIN} characters",
    ("content", "string_too_long"): f"Content must not exceed {CONTENT_MAX} characters",
    ("patientId", "value_error"): INVALID_PATIENT_ID,
}


def parse_patient_id(value: Any) -> uuid.UUID:
    """
    Parse a well-formed patient id.

    Only the hyphenated 36-character form is accepted; uuid.UUID() alone
    would also take braces, URNs and bare hex.

    Raises:
        ValueError: value is not a canonical UUID string
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not _UUID_PATTERN.match(value.strip()):
        raise ValueError(INVALID_PATIENT_ID)
    return uuid.UUID(value.strip())


class _CreateNoteInput(BaseModel):
    """Wire shape of a note-creation request (camelCase keys, snake_case accepted)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    patient_id: Optional[uuid.UUID] = None
    patient_name: str = Field(min_length=PATIENT_NAME_MIN, max_length=PATIENT_NAME_MAX)
    type: NoteType
    content: str = Field(min_length=CONTENT_MIN, max_length=CONTENT_MAX)

    @field_validator("patient_id", mode="before")
    @classmethod
    def check_patient_id(cls, v: Any) -> Optional[uuid.UUID]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return parse_patient_id(v)

    @field_validator("patient_name", mode="before")
    @classmethod
    def reject_blank_name(cls, v: Any) -> Any:
        # A name of only spaces counts as missing
        if isinstance(v, str) and not v.strip():
            return ""
        return v


def _field_name(loc: tuple) -> str:
    if not loc:
        return "body"
    name = str(loc[0])
    return to_camel(name) if "_" in name else name


def _translate(exc: pydantic.ValidationError) -> List[Dict[str, str]]:
    """Convert Pydantic's error list to `{field, message}` entries, one per field."""
    details: List[Dict[str, str]] = []
    seen = set()
    for err in exc.errors():
        field = _field_name(err.get("loc", ()))
        if field in seen:
            continue
        seen.add(field)
        message = _MESSAGES.get((field, err["type"]), err.get("msg", "Invalid value"))
        details.append({"field": field, "message": message})
    return details


def validate_create_note(raw: Mapping[str, Any]) -> NoteCreate:
    """
    Validate raw note-creation fields.

    Args:
        raw: Mapping with patientId (optional), patientName, type, content.
             snake_case keys are accepted as well.

    Returns:
        NoteCreate with a parsed UUID (or None) and a NoteType member.

    Raises:
        ValidationError: one or more fields are invalid; `details` lists each.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(
            message="Validation failed",
            details=[{"field": "body", "message": "Request body must be a JSON object"}],
        )
    try:
        parsed = _CreateNoteInput.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        raise ValidationError(message="Validation failed", details=_translate(exc)) from exc

    return NoteCreate(
        patient_id=parsed.patient_id,
        patient_name=parsed.patient_name,
        type=parsed.type,
        content=parsed.content,
    )


def validate_patient_id(value: Any) -> uuid.UUID:
    """
    Validate a patient id coming from a URL path or query.

    Raises:
        ValidationError: the id is not a well-formed UUID.
    """
    try:
        return parse_patient_id(value)
    except ValueError as exc:
        raise ValidationError(
            message="Validation failed",
            details=[{"field": "patientId", "message": INVALID_PATIENT_ID}],
        ) from exc
