"""
TraceNotes Backend - Error Taxonomy
====================================

What:  Application-specific exceptions for every failure a request can hit.
How:   Each exception carries a message, an optional context dict, and an
       ErrorKind tag. Handlers and the tracing helpers branch on `kind`;
       global exception handlers (main.py) map kinds to HTTP status codes.
Who:   Raised by the note service and storage backends; caught by handlers.

Exception Hierarchy:
    TraceNotesError (base)
    ├── InputError      kind=INPUT      → 400 Bad Request, never a span failure
    ├── NotFoundError   kind=NOT_FOUND  → 404 Not Found, never a span failure
    └── StorageError    kind=STORAGE    → 500 Internal Server Error, span failed

Span classification:
    INPUT and NOT_FOUND are expected, user-facing outcomes. STORAGE is an
    unexpected backend failure and is always recorded on the active span.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Tag identifying which branch of the taxonomy an error belongs to."""

    INPUT = "input"
    NOT_FOUND = "not_found"
    STORAGE = "storage"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def is_span_failure(self) -> bool:
        """Only backend failures mark the operation span as failed."""
        return self is ErrorKind.STORAGE


_HTTP_STATUS = {
    ErrorKind.INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
}


class TraceNotesError(Exception):
    """
    Base exception for all TraceNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for input errors)
        kind:     ErrorKind tag set by each subclass
    """

    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InputError(TraceNotesError):
    """
    Raised when the client sent something that cannot be parsed.

    When:    Malformed JSON body, body not matching {title, content},
             missing or non-UUID note_id query parameter.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "input_error",
            "message": "note_id must be a valid UUID",
            "details": {"field": "note_id"}
        }
    """

    kind = ErrorKind.INPUT

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(TraceNotesError):
    """
    Raised when a well-formed identifier matches no stored note.

    Storage backends raise this from `get()` when the key was never stored
    or is no longer retained. It is an expected business outcome.
    HTTP:    404 Not Found
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageError(TraceNotesError):
    """
    Raised when the storage backend fails for any reason.

    What:    Connectivity loss, timeout, serialization failure, driver error.
             Finer causes stay inside the backend; callers only see this type.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The original
        backend error is kept in `context` and logged server-side only.
    """

    kind = ErrorKind.STORAGE

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
