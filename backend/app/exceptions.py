"""
CampFinder Backend — Exception Hierarchy
==========================================

What:  Application exceptions, one per failure class the API reports.
Why:   Services raise these and stay free of HTTP details; the handlers registered
       in main.py turn each class into a status code and a JSON error body.
How:   Every exception carries a user-safe `message` and a `context` dict that is
       logged (and for client errors, echoed as `details`).

Exception Hierarchy:
    CampFinderError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── GeocodingError           → 503 Service Unavailable
"""

from typing import Any, Dict, Optional


class CampFinderError(Exception):
    """
    Base exception for all CampFinder application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info; logged, only returned for 4xx errors
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CampFinderError):
    """
    Client input broke a business rule the client can fix.

    Raised for unknown filter fields, filter values of the wrong type, a
    non-numeric radius distance, a missing or non-image upload, an upload over
    the size limit, and a duplicate bootcamp name.
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


class AuthenticationError(CampFinderError):
    """No bearer token, or one that fails signature/expiry checks."""

    def __init__(
        self,
        message: str = "Not authorised to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(CampFinderError):
    """The caller is authenticated but their role may not use the route."""

    def __init__(
        self,
        role: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"User role '{role}' is not authorised to access this route"
        ctx = context or {}
        ctx["role"] = role
        super().__init__(message=message, context=ctx)
        self.role = role


class NotFoundError(CampFinderError):
    """
    The requested resource does not exist.

    SQLAlchemy returns None for a missing row; services convert that (and ids
    that are not valid UUIDs) into this exception so routes answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource.capitalize()} id {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(CampFinderError):
    """
    Writing or reading an uploaded file failed on the storage volume.

    The OS error and path go into `context` for the log; the client only sees
    the generic message.
    """

    def __init__(
        self,
        message: str = "Problem with file upload. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GeocodingError(CampFinderError):
    """
    The geocoding provider could not be reached or answered with an error after
    every retry. Reported as 503 so clients retry later.
    """

    def __init__(
        self,
        message: str = "Geocoding service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(CampFinderError):
    """
    A query failed unexpectedly.

    The message returned to the client is always generic; the SQL error is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

