"""
Patient Notes Backend — Input Validation Tests
================================================

What:  Tests for validate_create_note / validate_patient_id.
How:   Pure function calls, no repository or HTTP involved.

What we test:
    ✅ Length boundaries for content (9/10/5000/5001) and name (0/1/100/101)
    ✅ Closed set of note types
    ✅ Patient id format (canonical UUID only; blank counts as absent)
    ✅ One detail entry per failing field
"""

import uuid

import pytest

from app.exceptions import ValidationError
from app.schemas.note import NoteType
from app.services.validation import (
    parse_patient_id,
    validate_create_note,
    validate_patient_id,
)

PATIENT_ID = "123e4567-e89b-12d3-a456-426614174000"


def _payload(**overrides):
    data = {
        "patientId": PATIENT_ID,
        "patientName": "John Doe",
        "type": "interim",
        "content": "Vitals stable, continuing treatment.",
    }
    data.update(overrides)
    return data


def _details(exc_info):
    return {d["field"]: d["message"] for d in exc_info.value.details}


class TestValidateCreateNote:
    def test_valid_payload(self):
        """Valid camelCase payload should parse into NoteCreate."""
        result = validate_create_note(_payload())
        assert result.patient_id == uuid.UUID(PATIENT_ID)
        assert result.patient_name == "John Doe"
        assert result.type is NoteType.INTERIM
        assert result.content == "Vitals stable, continuing treatment."

    def test_snake_case_keys_accepted(self):
        """snake_case keys should be accepted too."""
        result = validate_create_note(
            {
                "patient_id": PATIENT_ID,
                "patient_name": "John Doe",
                "type": "discharge",
                "content": "Discharged home in good condition.",
            }
        )
        assert result.patient_id == uuid.UUID(PATIENT_ID)
        assert result.type is NoteType.DISCHARGE

    @pytest.mark.parametrize("length", [10, 5000])
    def test_content_length_accepted(self, length):
        """Content of exactly 10 and 5000 characters should pass."""
        assert len(validate_create_note(_payload(content="x" * length)).content) == length

    def test_content_too_short(self):
        """9-character content should be rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(_payload(content="x" * 9))
        assert _details(exc_info) == {"content": "Content must be at least 10 characters"}

    def test_content_too_long(self):
        """5001-character content should be rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(_payload(content="x" * 5001))
        assert _details(exc_info) == {"content": "Content must not exceed 5000 characters"}

    def test_content_missing(self):
        """Missing content should be reported on the content field."""
        data = _payload()
        del data["content"]
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(data)
        assert exc_info.value.fields == ["content"]

    @pytest.mark.parametrize("length", [1, 100])
    def test_name_length_accepted(self, length):
        """Names of 1 and 100 characters should pass."""
        assert len(validate_create_note(_payload(patientName="a" * length)).patient_name) == length

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name):
        """Empty or whitespace-only names should be rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(_payload(patientName=name))
        assert _details(exc_info) == {"patientName": "Patient name is required"}

    def test_name_too_long(self):
        """101-character names should be rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(_payload(patientName="a" * 101))
        assert _details(exc_info) == {
            "patientName": "Patient name must not exceed 100 characters"
        }

    @pytest.mark.parametrize("note_type", ["followup", "INITIAL", ""])
    def test_unknown_type_rejected(self, note_type):
        """Types outside the closed set should be rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(_payload(type=note_type))
        assert _details(exc_info) == {"type": "Type must be initial, interim, or discharge"}

    @pytest.mark.parametrize(
        "patient_id",
        [
            "not-a-uuid",
            "123e4567e89b12d3a456426614174000",
            "{123e4567-e89b-12d3-a456-426614174000}",
            "123e4567-e89b-12d3-a456-42661417400",
        ],
    )
    def test_malformed_patient_id(self, patient_id):
        """Non-canonical UUID forms should be rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(_payload(patientId=patient_id))
        assert _details(exc_info) == {"patientId": "Invalid patient ID format"}

    @pytest.mark.parametrize("patient_id", [None, "", "  "])
    def test_blank_patient_id_is_absent(self, patient_id):
        """Blank patientId should count as absent."""
        assert validate_create_note(_payload(patientId=patient_id)).patient_id is None

    def test_omitted_patient_id_is_absent(self):
        data = _payload()
        del data["patientId"]
        assert validate_create_note(data).patient_id is None

    def test_uppercase_patient_id_accepted(self):
        """Upper-case hex digits should be accepted."""
        result = validate_create_note(_payload(patientId=PATIENT_ID.upper()))
        assert result.patient_id == uuid.UUID(PATIENT_ID)

    def test_every_failing_field_reported(self):
        """All failing fields should be reported together."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(
                {"patientId": "bad", "patientName": "", "type": "other", "content": "short"}
            )
        assert exc_info.value.message == "Validation failed"
        assert sorted(exc_info.value.fields) == ["content", "patientId", "patientName", "type"]

    def test_non_mapping_body_rejected(self):
        """Non-object bodies should be reported on the body field."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_note(["not", "an", "object"])
        assert exc_info.value.fields == ["body"]


class TestValidatePatientId:
    def test_valid_id(self):
        assert validate_patient_id(PATIENT_ID) == uuid.UUID(PATIENT_ID)

    def test_uuid_instance_passes_through(self):
        value = uuid.uuid4()
        assert validate_patient_id(value) is value

    @pytest.mark.parametrize("value", ["all", "", "1234", 42])
    def test_invalid_id(self, value):
        """Invalid path ids should raise ValidationError on patientId."""
        with pytest.raises(ValidationError) as exc_info:
            validate_patient_id(value)
        assert exc_info.value.details == [
            {"field": "patientId", "message": "Invalid patient ID format"}
        ]

    def test_parse_patient_id_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_patient_id("urn:uuid:123e4567-e89b-12d3-a456-426614174000")
