"""
Portfolio API — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the different failure scenarios.
Why:   Services raise meaningful errors; the global handlers registered in
       main.py translate each kind into a status code and JSON body, so no
       route needs its own try/except.
How:   Each exception carries a message and an optional context dict.

Exception Hierarchy:
    PortfolioError (base)
    ├── ValidationError          → 400 Bad Request (per-field error list)
    │   └── UploadRejectedError  → 400 Bad Request (wrong type / too large)
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class PortfolioError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Error description returned to the client
        context:  Additional debug info (logged with the error)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PortfolioError):
    """
    Raised when client input fails validation.

    What:    The client sent data that can be corrected and resent.
    When:    Missing required fields, malformed email, non-numeric budget,
             missing upload.
    HTTP:    400 Bad Request

    Every violated field is listed in `errors`, not only the first one:
        {"field": "email", "message": "A valid email address is required", "location": "body"}
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        self.errors = list(errors or [])
        if field and not self.errors:
            self.errors.append({"field": field, "message": message, "location": "body"})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UploadRejectedError(ValidationError):
    """
    Raised when an uploaded image is refused before anything is stored.

    When:    Declared content type outside the allow-list, or the file
             exceeds the configured size ceiling.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Uploaded file was rejected",
        field: str = "img",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            field=field,
            errors=[{"field": field, "message": message, "location": "file"}],
            context=context,
        )


class NotFoundError(PortfolioError):
    """
    Raised when a referenced record does not exist.

    The driver returns None for missing documents; services convert that into
    this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(PortfolioError):
    """
    Raised when writing or reading an uploaded file fails.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PortfolioError):
    """
    Raised when a MongoDB operation fails.

    When:    Server unreachable, write concern error, exhausted id attempts.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
