# Services package init
"""
Patient Notes Backend — Services Layer
=======================================

What:  Business logic sitting between routes (HTTP) and repositories (persistence).
How:   Services accept raw input, apply business rules, and return domain objects.
       They're injected into routes via FastAPI's dependency injection.

Service Inventory:
    - validation: pure input checks producing NoteCreate / patient UUIDs
    - NoteService: create_note, get_notes, get_all_notes, get_all_patients
"""
