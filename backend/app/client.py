"""
Patient Notes Backend — HTTP API Client
========================================

What:  Async client for the notes API, mirroring what the form-driven web
       client does: create a note, list a patient's notes, list all notes,
       list patients.
How:   httpx.AsyncClient; each call unwraps the `{success, data}` envelope
       and parses the payload into the same Pydantic entities the server uses.
Who:   Scripts, integration checks and tests.

Example:
    async with NotesClient("http://localhost:3000") as client:
        note = await client.create_note(
            patient_name="Jane Smith",
            type="initial",
            content="Initial assessment of patient condition.",
        )
        history = await client.get_notes_by_patient_id(note.patient_id)
"""

import uuid
from typing import Any, Dict, List, Optional, Union

import httpx

from app.schemas.note import CONTENT_MAX, CONTENT_MIN, PATIENT_NAME_MAX, Note, NoteType, Patient
from app.services.validation import parse_patient_id


class ApiClientError(Exception):
    """The API answered with `success: false` or a non-JSON error."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Optional[List[Dict[str, str]]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.details = details or []
        super().__init__(f"{status_code}: {message}")


def check_note_form(
    patient_name: str,
    type: Union[NoteType, str],
    content: str,
    patient_id: Optional[str] = None,
) -> Dict[str, str]:
    """
    Advisory pre-submit check, the same one the web form runs.

    Returns a field → message dict; empty means the form looks submittable.
    The server repeats every check and is the only authority: a clean result
    here does not guarantee a 201.
    """
    problems: Dict[str, str] = {}
    if not patient_name or not patient_name.strip():
        problems["patientName"] = "Patient name is required"
    elif len(patient_name) > PATIENT_NAME_MAX:
        problems["patientName"] = f"Patient name must not exceed {PATIENT_NAME_MAX} characters"

    type_value = type.value if isinstance(type, NoteType) else str(type)
    if type_value not in {t.value for t in NoteType}:
        problems["type"] = "Please select a note type"

    if len(content or "") < CONTENT_MIN:
        problems["content"] = f"Content must be at least {CONTENT_MIN} characters"
    elif len(content) > CONTENT_MAX:
        problems["content"] = f"Content must not exceed {CONTENT_MAX} characters"

    pid = (patient_id or "").strip()
    if pid:
        try:
            parse_patient_id(pid)
        except ValueError:
            problems["patientId"] = "Invalid patient ID format"
    elif type_value != NoteType.INITIAL.value:
        problems["patientId"] = "Patient ID is required for non-initial assessments"
    return problems


class NotesClient:
    """
    Thin async wrapper over the notes endpoints.

    Args:
        base_url:  API root, e.g. http://localhost:3000
        client:    Optional pre-built httpx.AsyncClient (tests pass one with
                   an ASGITransport); it is not closed by this wrapper
        timeout:   Per-request timeout in seconds for the owned client
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "NotesClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _unwrap(response: httpx.Response, fallback: str) -> Any:
        try:
            body = response.json()
        except ValueError:
            raise ApiClientError(response.status_code, fallback) from None
        if not isinstance(body, dict) or not body.get("success") or "data" not in body:
            message = body.get("error", fallback) if isinstance(body, dict) else fallback
            details = body.get("details") if isinstance(body, dict) else None
            raise ApiClientError(response.status_code, message, details)
        return body["data"]

    async def create_note(
        self,
        patient_name: str,
        type: Union[NoteType, str],
        content: str,
        patient_id: Optional[Union[str, uuid.UUID]] = None,
    ) -> Note:
        payload: Dict[str, Any] = {
            "patientName": patient_name,
            "type": type.value if isinstance(type, NoteType) else type,
            "content": content,
        }
        if patient_id is not None:
            payload["patientId"] = str(patient_id)
        response = await self._client.post("/notes", json=payload)
        return Note.model_validate(self._unwrap(response, "Failed to create note"))

    async def get_notes_by_patient_id(self, patient_id: Union[str, uuid.UUID]) -> List[Note]:
        response = await self._client.get(f"/notes/{patient_id}")
        data = self._unwrap(response, "Failed to fetch notes")
        return [Note.model_validate(item) for item in data]

    async def get_all_notes(self) -> List[Note]:
        response = await self._client.get("/notes/all")
        data = self._unwrap(response, "Failed to fetch all notes")
        return [Note.model_validate(item) for item in data]

    async def get_all_patients(self) -> List[Patient]:
        response = await self._client.get("/notes/patients/all")
        data = self._unwrap(response, "Failed to fetch patients")
        return [Patient.model_validate(item) for item in data]

    async def health(self) -> Dict[str, Any]:
        response = await self._client.get("/health")
        response.raise_for_status()
        return response.json()
