"""
Active Workout Session Schemas
==============================
State owned by the session controller, plus the request/response bodies
of the sessions API.

Key design decisions:
- SetEntry copies exercise_id/exercise_name from the prescription when
  it is created. Completed-set records must not change if the workout's
  display names are edited later.
- weight/reps/rpe stay None until the user enters them; nothing is
  persisted until the set is completed.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    ABORTED = "aborted"


SetField = Literal["weight", "reps", "rpe"]


# ---------------------------------------------------------------------------
# Controller state
# ---------------------------------------------------------------------------

class SetEntry(BaseModel):
    """One set of the current exercise, as the user is filling it in."""

    exercise_id: str
    exercise_name: str
    set_number: int = Field(..., ge=1)
    weight: Optional[float] = None
    reps: Optional[int] = None
    rpe: Optional[int] = None
    completed: bool = False
    target_reps: Optional[int] = None
    rest_seconds: Optional[int] = None


class SessionState(BaseModel):
    """Snapshot of one in-progress workout."""

    session_id: Optional[str] = None
    workout_id: str
    workout_name: str
    status: SessionStatus = SessionStatus.NOT_STARTED
    started_at: Optional[datetime] = None
    current_exercise_index: int = 0
    exercise_count: int
    sets: list[SetEntry] = Field(default_factory=list)
    rest_timer: int = 0
    is_resting: bool = False

    @property
    def is_last_exercise(self) -> bool:
        return self.current_exercise_index == self.exercise_count - 1

    @property
    def all_sets_completed(self) -> bool:
        return all(s.completed for s in self.sets)

    @property
    def completed_set_count(self) -> int:
        return sum(1 for s in self.sets if s.completed)


class SetCompletionResult(BaseModel):
    """Returned by complete_set once the set has been recorded."""

    set: SetEntry
    rest_started: bool
    rest_seconds: int = 0


class CompletionSummary(BaseModel):
    """Shown to the user when the workout is finalised."""

    session_id: str
    workout_name: str
    completed_at: datetime
    duration_minutes: int
    message: str


# ---------------------------------------------------------------------------
# API bodies
# ---------------------------------------------------------------------------

class SessionStartRequest(BaseModel):
    workout_id: str


class SetFieldUpdate(BaseModel):
    """PATCH body for a single set field. ``value=None`` clears the field."""

    field: SetField
    value: Optional[float] = None


class RestExtendRequest(BaseModel):
    seconds: Optional[int] = Field(
        default=None,
        gt=0,
        le=3600,
        description="Seconds to add. Defaults to the configured extension (30s).",
    )


class AdvanceResponse(BaseModel):
    """Result of POST /advance. ``summary`` is set when the workout finished."""

    state: SessionState
    summary: Optional[CompletionSummary] = None
