"""
Domain errors raised by the tracker services.

Services raise these; routers turn them into HTTP responses with
``to_http_exception`` so the service layer stays free of FastAPI.
"""

from fastapi import HTTPException


class TrackerError(Exception):
    """Base class for all tracker errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(TrackerError, ValueError):
    """A required field is missing, an enum value is unknown, or values conflict."""

    status_code = 400


class NotFoundError(TrackerError, LookupError):
    """The referenced application (or related record) does not exist."""

    status_code = 404


class InvalidTransitionError(TrackerError):
    """The requested status is unknown or equal to the current status."""

    status_code = 409


class ConflictError(TrackerError):
    """A write collides with an existing record, such as a duplicate tag name."""

    status_code = 409


def to_http_exception(exc: TrackerError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)
