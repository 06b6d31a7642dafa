"""
HTTP error mapping for the workout services.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from app.services.errors import (
    PersistenceError,
    PreconditionError,
    FriendRequestNotFoundError,
    ValidationError,
    WorkoutNotFoundError,
    WorkoutSessionError,
)

_STATUS_BY_ERROR: dict[type, int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PreconditionError: status.HTTP_409_CONFLICT,
    WorkoutNotFoundError: status.HTTP_404_NOT_FOUND,
    FriendRequestNotFoundError: status.HTTP_404_NOT_FOUND,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(exc: WorkoutSessionError) -> HTTPException:
    """Translate a service error into the ``{"message", "code"}`` detail shape."""
    status_code = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return HTTPException(
        status_code=status_code,
        detail={"message": exc.message, "code": exc.code},
    )
