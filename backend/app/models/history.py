"""
Workout History Schemas
=======================
Read models for the history screen and the profile stats card.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field


class SessionHistoryItem(BaseModel):
    """One past (or abandoned) workout session."""

    id: str
    workout_id: Optional[str] = None
    workout_name: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None

    @computed_field
    @property
    def status(self) -> Literal["completed", "incomplete"]:
        return "completed" if self.completed_at else "incomplete"


class SessionSetRecord(BaseModel):
    """A set as stored in workout_session_sets."""

    id: str
    session_id: str
    exercise_id: str
    exercise_name: str
    set_number: int
    weight_lbs: Optional[float] = None
    reps: Optional[int] = None
    rpe: Optional[int] = None
    completed: bool = False
    created_at: Optional[datetime] = None


class UserStats(BaseModel):
    workouts_completed: int = Field(..., ge=0)
    total_workout_minutes: int = Field(..., ge=0)
    current_streak: int = Field(..., ge=0, description="Consecutive days with a completed workout.")
    friends_count: int = Field(0, ge=0)
