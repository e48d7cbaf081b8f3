"""
Patient Notes Backend — Custom Exception Hierarchy
===================================================

What:  Application-specific exceptions for each error category.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the `{success: false, ...}` envelope with the right status code.
Who:   Raised by validation, services and repositories; caught by global handlers.

Exception Hierarchy:
    PatientNotesError (base)
    ├── ValidationError        → 400 Bad Request (client can fix the input)
    ├── MissingPatientIdError  → 400 Bad Request (business rule)
    ├── PersistenceError       → 500 Internal Server Error (storage I/O failed)
    └── UnknownError           → 500 Internal Server Error (uncategorized)

Services never catch and swallow these: they propagate to the HTTP boundary,
which classifies and formats them.
"""

from typing import Any, Dict, List, Optional


class PatientNotesError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PatientNotesError):
    """
    Raised when client input fails validation.

    What:    The client sent data that can be corrected.
    When:    Missing/oversized patient name, unknown note type, content outside
             10..5000 characters, malformed patient id.
    HTTP:    400 Bad Request

    `details` enumerates every violation, one entry per field:

        [
            {"field": "content", "message": "Content must be at least 10 characters"},
            {"field": "type", "message": "Type must be initial, interim, or discharge"}
        ]
    """

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[List[Dict[str, str]]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.details: List[Dict[str, str]] = list(details or [])
        if field and not self.details:
            self.details.append({"field": field, "message": message})

    @property
    def fields(self) -> List[str]:
        """Names of the fields that failed, in report order."""
        return [d["field"] for d in self.details]


class MissingPatientIdError(PatientNotesError):
    """
    Raised when an interim or discharge note arrives without a patient id.

    Only `initial` notes may have their patient id generated by the server;
    every later note must point at an existing patient.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        note_type: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if note_type:
            ctx["type"] = note_type
        super().__init__(
            message="Patient ID is required for non-initial assessments",
            context=ctx,
        )
        self.note_type = note_type


class PersistenceError(PatientNotesError):
    """
    Raised when the storage backend fails.

    What:    A query, insert or transaction failed in the repository.
    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The original
        driver error goes into `context` and is logged server-side only.
        Writes are never retried automatically.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnknownError(PatientNotesError):
    """
    Anything that does not fit the categories above.

    The catch-all handler wraps unexpected exceptions in this type for
    logging; the client only ever sees "Internal server error".
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
