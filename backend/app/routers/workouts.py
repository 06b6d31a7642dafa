"""
Workouts Router
===============
GET /api/v1/workouts       — workouts the user can start (own + public)
GET /api/v1/workouts/{id}  — one workout with its ordered exercise prescriptions
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header

from app.auth import get_authenticated_user
from app.models.workout import WorkoutDefinition, WorkoutSummary
from app.routers.errors import to_http_exception
from app.services.errors import WorkoutSessionError
from app.services.workouts import get_workout_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/workouts", tags=["workouts"])


@router.get("", response_model=list[WorkoutSummary], summary="List workouts")
async def list_workouts(
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> list[WorkoutSummary]:
    user = get_authenticated_user(authorization)
    try:
        return await get_workout_service().list_workouts(user.user_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc


@router.get(
    "/{workout_id}",
    response_model=WorkoutDefinition,
    summary="Workout detail",
    responses={404: {"description": "Workout not found, private, or empty"}},
)
async def get_workout(
    workout_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> WorkoutDefinition:
    user = get_authenticated_user(authorization)
    try:
        return await get_workout_service().get_definition(workout_id, user.user_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc
