"""
Workout Schemas
===============
Typed records for the workout catalogue and exercise library.

Supabase returns loosely-shaped joined rows
(``workouts -> workout_exercises -> exercises``). ``WorkoutDefinition.from_row``
is the single place that shape is interpreted, so the session controller
never touches raw rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Exercise library
# ---------------------------------------------------------------------------

MUSCLE_GROUPS = (
    "chest",
    "back",
    "shoulders",
    "biceps",
    "triceps",
    "quads",
    "hamstrings",
    "glutes",
    "core",
)


class Exercise(BaseModel):
    """One entry of the shared exercise library."""

    id: str
    name: str
    description: Optional[str] = None
    muscle_groups: list[str] = Field(default_factory=list)
    equipment: Optional[str] = None
    instructions: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Workout definition (read-only input to the session controller)
# ---------------------------------------------------------------------------

class ExercisePrescription(BaseModel):
    """Planned sets/reps/rest for one exercise within a workout."""

    exercise_id: str
    exercise_name: str
    sets: int = Field(..., ge=1, le=50)
    reps: Optional[int] = Field(default=None, ge=1)
    rest_seconds: Optional[int] = Field(
        default=None,
        ge=0,
        description="Rest after each set. None means use the server default.",
    )
    order_index: int = 0
    notes: Optional[str] = None
    description: Optional[str] = None
    muscle_groups: list[str] = Field(default_factory=list)
    equipment: Optional[str] = None


class WorkoutDefinition(BaseModel):
    """A workout and its ordered exercise prescriptions."""

    id: str
    name: str
    description: Optional[str] = None
    exercises: list[ExercisePrescription] = Field(..., min_length=1)

    model_config = {"frozen": True}

    @classmethod
    def from_row(cls, row: dict) -> "WorkoutDefinition":
        """Build a definition from a joined Supabase ``workouts`` row."""
        joined = sorted(
            row.get("workout_exercises") or [],
            key=lambda we: we.get("order_index") or 0,
        )
        exercises = []
        for we in joined:
            exercise = we.get("exercise") or {}
            exercises.append(
                ExercisePrescription(
                    exercise_id=we["exercise_id"],
                    exercise_name=exercise.get("name") or "Exercise",
                    sets=we["sets"],
                    reps=we.get("reps"),
                    rest_seconds=we.get("rest_seconds"),
                    order_index=we.get("order_index") or 0,
                    notes=we.get("notes"),
                    description=exercise.get("description"),
                    muscle_groups=exercise.get("muscle_groups") or [],
                    equipment=exercise.get("equipment"),
                )
            )
        return cls(
            id=row["id"],
            name=row["name"],
            description=row.get("description"),
            exercises=exercises,
        )


class WorkoutSummary(BaseModel):
    """List-view entry for the workouts screen."""

    id: str
    name: str
    description: Optional[str] = None
    user_id: str
    is_public: bool = False
    exercise_count: int = 0
    created_at: Optional[datetime] = None
