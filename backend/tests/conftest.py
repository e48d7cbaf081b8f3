"""
Patient Notes Backend — Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── memory_repository: fresh InMemoryNoteRepository
    ├── sql_repository:    SqlNoteRepository on an in-memory aiosqlite database
    ├── clock:             deterministic, strictly increasing UTC timestamps
    ├── note_service:      NoteService over memory_repository + clock
    ├── make_note:         builder for Note entities with sensible defaults
    ├── test_client:       HTTPX AsyncClient talking to create_app(memory_repository), stepping clock
    └── sample_note_data:  a valid POST /notes body
"""

import os
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

# Override settings for testing BEFORE any app imports
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.repositories.memory import InMemoryNoteRepository
from app.repositories.sql import SqlNoteRepository
from app.schemas.note import Note, NoteType
from app.services.note_service import NoteService

PATIENT_A = UUID("123e4567-e89b-12d3-a456-426614174000")
PATIENT_B = UUID("223e4567-e89b-12d3-a456-426614174000")


class StepClock:
    """Returns start, start+step, start+2*step, ... on successive calls."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def clock():
    return StepClock(datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_repository():
    return InMemoryNoteRepository()


@pytest_asyncio.fixture
async def sql_repository():
    """
    Relational repository on a private in-memory SQLite database.

    StaticPool keeps the single connection alive so every session sees the
    same database; the schema is created fresh per test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    repository = SqlNoteRepository(engine)
    await repository.create_schema()
    yield repository
    await repository.close()


@pytest.fixture
def note_service(memory_repository, clock):
    return NoteService(memory_repository, clock=clock)


@pytest.fixture
def make_note():
    """
    Builder for Note entities.

    Usage:
        note = make_note(patient_id=PATIENT_A, minutes=5)
    """

    def _make(
        patient_id: UUID = PATIENT_A,
        patient_name: str = "John Doe",
        type: NoteType = NoteType.INITIAL,
        content: str = "Patient presented with fever and persistent cough.",
        minutes: int = 0,
    ) -> Note:
        return Note(
            id=uuid4(),
            patient_id=patient_id,
            patient_name=patient_name,
            type=type,
            content=content,
            created_at=datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes),
        )

    return _make


@pytest.fixture
def sample_note_data():
    return {
        "patientId": str(PATIENT_A),
        "patientName": "John Doe",
        "type": "initial",
        "content": "Patient presented with symptoms of fever and persistent cough.",
    }


@pytest_asyncio.fixture
async def test_client(memory_repository, clock):
    """
    HTTPX AsyncClient routed straight into a fresh app.

    The app is built around `memory_repository`, so tests can seed or
    inspect storage directly. Its service uses the stepping clock, so notes
    created one after another always get increasing timestamps.
    """
    from app.main import create_app

    app = create_app(repository=memory_repository)
    app.state.note_service = NoteService(memory_repository, clock=clock)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
