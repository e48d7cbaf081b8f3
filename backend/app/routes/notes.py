"""
Patient Notes Backend — Notes Route Handlers
=============================================

What:  POST /notes, GET /notes/all, GET /notes/patients/all, GET /notes/{patientId}.
How:   Extracts request data, delegates to NoteService, wraps results in the
       `{success: true, data}` envelope. Errors are formatted by the global
       exception handlers in main.py.
Who:   Called by the form-driven client (and app.client.NotesClient).

Route order matters: the two fixed `/notes/.../all` paths are registered
before `/notes/{patient_id}` so "all" is never parsed as a patient id.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from app.dependencies import get_note_service
from app.schemas.note import ErrorResponse, Note, Patient, SuccessResponse
from app.services.note_service import NoteService

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/notes", tags=["Notes"])


@router.post(
    "",
    status_code=201,
    response_model=SuccessResponse[Note],
    responses={
        201: {"description": "Note created"},
        400: {"description": "Invalid input or missing patient id", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Create a patient note",
    description=(
        "Records an initial, interim or discharge note. An initial note without "
        "patientId starts a new patient with a generated id; interim and discharge "
        "notes must reference an existing patientId."
    ),
)
async def create_note(
    body: Dict[str, Any] = Body(
        ...,
        examples=[
            {
                "patientName": "John Doe",
                "type": "initial",
                "content": "Patient presented with fever and persistent cough.",
            }
        ],
    ),
    service: NoteService = Depends(get_note_service),
) -> SuccessResponse[Note]:
    # Body is passed through untyped: field rules live in app.services.validation
    note = await service.create_note(body)
    return SuccessResponse[Note](data=note)


@router.get(
    "/all",
    response_model=SuccessResponse[List[Note]],
    summary="List every note",
    description="Returns all notes across all patients, newest first.",
)
async def list_all_notes(
    service: NoteService = Depends(get_note_service),
) -> SuccessResponse[List[Note]]:
    notes = await service.get_all_notes()
    return SuccessResponse[List[Note]](data=notes)


@router.get(
    "/patients/all",
    response_model=SuccessResponse[List[Patient]],
    summary="List known patients",
    description="One entry per distinct patient id, ordered by name.",
)
async def list_patients(
    service: NoteService = Depends(get_note_service),
) -> SuccessResponse[List[Patient]]:
    patients = await service.get_all_patients()
    return SuccessResponse[List[Patient]](data=patients)


@router.get(
    "/{patient_id}",
    response_model=SuccessResponse[List[Note]],
    responses={
        400: {"description": "Malformed patient id", "model": ErrorResponse},
    },
    summary="List notes of one patient",
    description=(
        "Returns the patient's notes, newest first. An unknown but well-formed "
        "id returns an empty list."
    ),
)
async def list_patient_notes(
    patient_id: str,
    service: NoteService = Depends(get_note_service),
) -> SuccessResponse[List[Note]]:
    """
    patient_id is taken as a plain string so a malformed id reaches
    NoteService validation and yields the 400 envelope, not FastAPI's 422.
    """
    notes = await service.get_notes(patient_id)
    return SuccessResponse[List[Note]](data=notes)
