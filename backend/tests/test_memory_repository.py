"""
Patient Notes Backend — In-Memory Repository Tests
===================================================

What we test:
    ✅ save / find_by_patient_id round trip
    ✅ find_all is newest first across patients
    ✅ Patient list uses the name of the most recent note
    ✅ Returned lists are copies
    ✅ Concurrent saves from several threads are all kept
"""

import asyncio
import threading
from uuid import UUID

import pytest

from app.repositories.memory import InMemoryNoteRepository

PATIENT_A = UUID("123e4567-e89b-12d3-a456-426614174000")
PATIENT_B = UUID("223e4567-e89b-12d3-a456-426614174000")


class TestInMemoryNoteRepository:
    def setup_method(self):
        self.repository = InMemoryNoteRepository()

    @pytest.mark.asyncio
    async def test_empty(self):
        """Fresh repository should return empty results everywhere."""
        assert await self.repository.find_all() == []
        assert await self.repository.find_all_patients() == []
        assert await self.repository.find_by_patient_id(PATIENT_A) == []

    @pytest.mark.asyncio
    async def test_save_and_find(self, make_note):
        """Saved note should be found under its patient only."""
        note = make_note(patient_id=PATIENT_A)
        await self.repository.save(note)

        assert await self.repository.find_by_patient_id(PATIENT_A) == [note]
        assert await self.repository.find_by_patient_id(PATIENT_B) == []
        assert len(self.repository) == 1

    @pytest.mark.asyncio
    async def test_find_all_newest_first(self, make_note):
        """find_all should order notes newest first across patients."""
        old = make_note(patient_id=PATIENT_A, minutes=0)
        new = make_note(patient_id=PATIENT_B, minutes=10)
        middle = make_note(patient_id=PATIENT_A, minutes=5)
        for note in (old, new, middle):
            await self.repository.save(note)

        assert await self.repository.find_all() == [new, middle, old]

    @pytest.mark.asyncio
    async def test_latest_name_wins(self, make_note):
        """Patient name should come from the most recently saved note."""
        await self.repository.save(make_note(patient_id=PATIENT_A, patient_name="Jon Doe"))
        await self.repository.save(make_note(patient_id=PATIENT_A, patient_name="John Doe", minutes=1))

        patients = await self.repository.find_all_patients()
        assert len(patients) == 1
        assert patients[0].id == PATIENT_A
        assert patients[0].name == "John Doe"

    @pytest.mark.asyncio
    async def test_returned_list_is_a_copy(self, make_note):
        """Mutating a returned list should not touch storage."""
        await self.repository.save(make_note())
        notes = await self.repository.find_by_patient_id(PATIENT_A)
        notes.clear()
        assert len(await self.repository.find_by_patient_id(PATIENT_A)) == 1

    @pytest.mark.asyncio
    async def test_clear(self, make_note):
        """clear() should drop every note."""
        await self.repository.save(make_note())
        self.repository.clear()
        assert len(self.repository) == 0

    def test_concurrent_saves_from_threads(self, make_note):
        """Saves from several threads should all be kept."""
        notes = [make_note(patient_id=PATIENT_A, minutes=i) for i in range(50)]

        def worker(batch):
            for note in batch:
                asyncio.run(self.repository.save(note))

        threads = [threading.Thread(target=worker, args=(notes[i::5],)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stored = asyncio.run(self.repository.find_by_patient_id(PATIENT_A))
        assert {n.id for n in stored} == {n.id for n in notes}

    @pytest.mark.asyncio
    async def test_instances_do_not_share_state(self, make_note):
        """Two repositories should not see each other's notes."""
        other = InMemoryNoteRepository()
        await self.repository.save(make_note())
        assert await other.find_all() == []
