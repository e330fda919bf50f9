"""
Application exception hierarchy.

Every error raised by the hiring workflow carries the HTTP status and the
machine-readable code it is reported with, so the error handlers in
``core.middleware.error_handling`` can render it without a lookup table.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base exception for errors reported to API clients."""

    status_code: int = 400
    code: str = "BAD_REQUEST"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(AppError):
    """Raised when a request or one of its child records does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class InvalidStateError(AppError):
    """Raised when a request is not in a status the operation accepts."""

    status_code = 400
    code = "INVALID_STATE"


class PreconditionFailedError(AppError):
    """Raised when a required child record or prior step is missing."""

    status_code = 400
    code = "PRECONDITION_FAILED"


class InvalidInputError(AppError):
    """Raised when an argument fails validation."""

    status_code = 400
    code = "VALIDATION_ERROR"


class ForbiddenError(AppError):
    """Raised when the caller may not perform the operation."""

    status_code = 403
    code = "FORBIDDEN"
