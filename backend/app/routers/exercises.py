"""
Exercise Library Router
=======================
GET /api/v1/exercises — the shared exercise library, ordered by name.

Filters:
  search:        case-insensitive substring of the name or of any muscle group
  muscle_group:  exact muscle group, e.g. "chest"
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query

from app.auth import get_authenticated_user
from app.models.workout import MUSCLE_GROUPS, Exercise
from app.routers.errors import to_http_exception
from app.services.errors import WorkoutSessionError
from app.services.workouts import get_workout_service

router = APIRouter(prefix="/api/v1/exercises", tags=["exercises"])


@router.get("", response_model=list[Exercise], summary="Browse the exercise library")
async def list_exercises(
    search: Optional[str] = Query(default=None, max_length=100),
    muscle_group: Optional[str] = Query(default=None),
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> list[Exercise]:
    get_authenticated_user(authorization)

    if muscle_group is not None and muscle_group not in MUSCLE_GROUPS:
        raise HTTPException(
            status_code=422,
            detail={
                "message": f"Invalid muscle_group: '{muscle_group}'",
                "code": "invalid_muscle_group",
                "valid_muscle_groups": list(MUSCLE_GROUPS),
            },
        )

    try:
        return await get_workout_service().list_exercises(search, muscle_group)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc
