"""
RoadRater Backend — Error Taxonomy
====================================

What:  The closed set of application errors and the HTTP status each maps to.
How:   Every error carries an ErrorKind. The single boundary handler in
       main.py looks the kind up in STATUS_BY_KIND, which covers every kind.
Who:   Raised by the persistence gateway, validators, services and the auth
       guard; converted to the error envelope at the HTTP boundary.

Error Hierarchy:
    RoadRaterError (base)
    ├── ValidationError     → VALIDATION    → 400 Bad Request
    ├── UnauthorizedError   → UNAUTHORIZED  → 401 Unauthorized
    ├── NotFoundError       → NOT_FOUND     → 404 Not Found
    ├── ConflictError       → CONFLICT      → 409 Conflict
    └── DatabaseError       → INTERNAL      → 500 Internal Server Error

Client-facing messages:
    INTERNAL errors never expose their message or context to the client.
    Everything in `context` is logged server-side only.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ErrorKind(str, Enum):
    """Tag identifying which branch of the taxonomy an error belongs to."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}

GENERIC_INTERNAL_MESSAGE = "An internal error occurred. Please try again later."


class RoadRaterError(Exception):
    """
    Base exception for all RoadRater application errors.

    Attributes:
        kind:     Taxonomy tag, fixed per subclass
        message:  Client-facing description (except for INTERNAL)
        details:  Optional client-facing payload (violation list, field name)
        context:  Debug info, logged but never returned to the client
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[Union[List[str], Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details
        self.context = context or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(RoadRaterError):
    """
    Raised when client input fails validation, before any I/O.

    `details` carries either the full violation list (rating payloads) or
    a `{"field": name}` marker (credential checks).
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Union[List[str], Dict[str, Any]]] = None,
        field: Optional[str] = None,
    ):
        if field and details is None:
            details = {"field": field}
        super().__init__(message=message, details=details)
        self.field = field


class UnauthorizedError(RoadRaterError):
    """
    Raised when authentication is missing or fails.

    The message is deliberately generic: it never says whether the token was
    malformed, badly signed or expired, nor whether a username exists.
    """

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message)


class NotFoundError(RoadRaterError):
    """Raised when a requested resource does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str = "Resource not found",
        resource: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        ctx: Dict[str, Any] = {}
        if resource:
            ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(RoadRaterError):
    """Raised when a write collides with an existing unique key."""

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(RoadRaterError):
    """
    Raised when a database operation fails unexpectedly.

    Connection loss, missing tables, deadlocks. The client only ever sees
    GENERIC_INTERNAL_MESSAGE; the original error type and statement are kept
    in `context` for the server log.
    """

    kind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
