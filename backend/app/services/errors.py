"""
Workout Session Errors
======================
Shared error taxonomy for the active-workout flow. Routers map each
class to an HTTP status; ``code`` is the stable machine-readable value
returned to the mobile app alongside the message.
"""

from __future__ import annotations


class WorkoutSessionError(Exception):
    """Base class for every error raised by the workout services."""

    code = "workout_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(WorkoutSessionError):
    """Missing or malformed user input. State is left unchanged."""

    code = "validation_error"


class PreconditionError(WorkoutSessionError):
    """Operation offered out of order, e.g. advancing before all sets are done."""

    code = "precondition_failed"


class PersistenceError(WorkoutSessionError):
    """The Supabase call failed or the user is not authenticated."""

    code = "db_error"


class WorkoutNotFoundError(WorkoutSessionError):
    """Workout id does not exist or is not visible to the user."""

    code = "workout_not_found"


class FriendRequestNotFoundError(WorkoutSessionError):
    """No pending friend request with that id is addressed to the user."""

    code = "friend_request_not_found"
