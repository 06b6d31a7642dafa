"""
Workout Service
===============
Read access to the workout catalogue and the exercise library.

- list_workouts():  the user's own workouts plus public ones, newest first
- get_definition(): one workout with its prescriptions, ordered by order_index
- list_exercises(): library ordered by name with search / muscle-group filters
"""

from __future__ import annotations

import logging
from typing import Optional

from app.db.supabase import get_supabase_client
from app.models.workout import Exercise, WorkoutDefinition, WorkoutSummary
from app.services.errors import PersistenceError, WorkoutNotFoundError

logger = logging.getLogger(__name__)

_WORKOUT_WITH_EXERCISES = "*, workout_exercises (*, exercise:exercises (*))"


class WorkoutService:
    """Reads workouts and exercises from Supabase."""

    def __init__(self) -> None:
        self._db = get_supabase_client()

    async def list_workouts(self, user_id: str) -> list[WorkoutSummary]:
        try:
            result = (
                self._db.table("workouts")
                .select("*, workout_exercises (id)")
                .or_(f"user_id.eq.{user_id},is_public.eq.true")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            logger.error("Failed to load workouts for user %s: %s", user_id, exc)
            raise PersistenceError("Failed to load workouts") from exc

        return [
            WorkoutSummary(
                **{k: v for k, v in row.items() if k != "workout_exercises"},
                exercise_count=len(row.get("workout_exercises") or []),
            )
            for row in result.data or []
        ]

    async def get_definition(self, workout_id: str, user_id: str) -> WorkoutDefinition:
        """Return the workout with its ordered prescriptions.

        Raises WorkoutNotFoundError if it does not exist, is private to
        another user, or has no exercises to perform.
        """
        try:
            result = (
                self._db.table("workouts")
                .select(_WORKOUT_WITH_EXERCISES)
                .eq("id", workout_id)
                .maybe_single()
                .execute()
            )
        except Exception as exc:
            logger.error("Failed to load workout %s: %s", workout_id, exc)
            raise PersistenceError("Failed to load workout") from exc

        row = result.data if result else None
        if not row or (row.get("user_id") != user_id and not row.get("is_public")):
            raise WorkoutNotFoundError(f"Workout {workout_id} not found")
        if not row.get("workout_exercises"):
            raise WorkoutNotFoundError(
                f"Workout {workout_id} has no exercises", "workout_empty"
            )

        return WorkoutDefinition.from_row(row)

    async def list_exercises(
        self,
        search: Optional[str] = None,
        muscle_group: Optional[str] = None,
    ) -> list[Exercise]:
        try:
            result = self._db.table("exercises").select("*").order("name").execute()
        except Exception as exc:
            logger.error("Failed to load exercises: %s", exc)
            raise PersistenceError("Failed to load exercises") from exc

        exercises = [Exercise(**row) for row in result.data or []]
        return filter_exercises(exercises, search, muscle_group)


def filter_exercises(
    exercises: list[Exercise],
    search: Optional[str] = None,
    muscle_group: Optional[str] = None,
) -> list[Exercise]:
    """Name or muscle-group substring match, then exact muscle-group filter."""
    query = (search or "").strip().lower()
    if query:
        exercises = [
            e for e in exercises
            if query in e.name.lower()
            or any(query in mg.lower() for mg in e.muscle_groups)
        ]
    if muscle_group:
        exercises = [e for e in exercises if muscle_group in e.muscle_groups]
    return exercises


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_service: WorkoutService | None = None


def get_workout_service() -> WorkoutService:
    global _default_service
    if _default_service is None:
        _default_service = WorkoutService()
    return _default_service
