"""
Notes API - Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for every failure the service reports.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return plain-text responses with the matching HTTP status code.
Who:   Raised by the NoteStore, request validation, and settings loading.

Exception Hierarchy:
    NotesError (base)
    ├── ValidationError       → 400 Bad Request (bad note name or payload)
    ├── AlreadyExistsError    → 400 Bad Request (create on an existing note)
    ├── NotFoundError         → 404 Not Found
    ├── StorageFailureError   → 500 Internal Server Error
    └── InvalidConfigError    → fatal at startup (never reaches HTTP)
"""

from typing import Any, Dict, Optional


class NotesError(Exception):
    """
    Base exception for all Notes API errors.

    Attributes:
        message:  Error description (safe to return in an API response)
        context:  Additional debug info (logged but NOT returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesError):
    """
    Raised when client input fails validation.

    When:    Empty note name, name containing a path separator or parent
             segment, missing form fields, request body that is not UTF-8.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AlreadyExistsError(NotesError):
    """
    Raised when creating a note whose file is already present.

    HTTP:    400 Bad Request. The existing content is left untouched.
    """

    def __init__(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["name"] = name
        super().__init__(message="Note already exists", context=ctx)
        self.name = name


class NotFoundError(NotesError):
    """
    Raised when a requested note does not exist.

    When:    Read, update, or delete on a name with no backing file.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "note",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageFailureError(NotesError):
    """
    Raised when file system operations fail unexpectedly.

    What:    Could not create, enumerate, read, write, or delete in the cache
             directory (permission denied, disk full, undecodable file, ...).
    HTTP:    500 Internal Server Error. At startup it is fatal.

    The client only ever sees a generic message; paths and OS errors stay
    in the context dict and the server log.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidConfigError(NotesError):
    """
    Raised when startup settings are missing or malformed.

    Fatal: the entry point logs the diagnostic and exits with status 1.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
