"""
Active Workout Sessions Router
==============================
HTTP surface of the ActiveWorkoutSession controller.

    POST   /api/v1/sessions                              start a workout
    GET    /api/v1/sessions/{id}                         current state
    PATCH  /api/v1/sessions/{id}/sets/{index}            edit weight/reps/rpe
    POST   /api/v1/sessions/{id}/sets/{index}/complete   record a set
    POST   /api/v1/sessions/{id}/rest/skip               end the rest now
    POST   /api/v1/sessions/{id}/rest/extend             add rest time
    POST   /api/v1/sessions/{id}/advance                 next exercise / finish
    POST   /api/v1/sessions/{id}/finish                  finalise the session
    DELETE /api/v1/sessions/{id}                         abandon the workout

Controllers live in the in-process SessionRegistry from a successful
start until finish, abort, the user's next start, or idle eviction.
Every failed Supabase write leaves the controller unchanged, so the app
can simply retry the same call.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, Response, status

from app.auth import get_authenticated_user
from app.config import get_settings
from app.models.session import (
    AdvanceResponse,
    CompletionSummary,
    RestExtendRequest,
    SessionStartRequest,
    SessionState,
    SetFieldUpdate,
)
from app.models.user import UserContext
from app.routers.errors import to_http_exception
from app.services.active_workout import ActiveWorkoutSession
from app.services.errors import WorkoutSessionError
from app.services.session_registry import get_session_registry
from app.services.session_store import get_session_store
from app.services.workouts import get_workout_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _new_controller(user: UserContext) -> ActiveWorkoutSession:
    settings = get_settings()
    return ActiveWorkoutSession(
        user,
        get_session_store(),
        default_rest_seconds=settings.default_rest_seconds,
        rest_extension_seconds=settings.rest_extension_seconds,
        rest_tick_seconds=settings.rest_tick_seconds,
        auto_countdown=settings.enable_rest_countdown,
    )


def _get_controller(session_id: str, user: UserContext) -> ActiveWorkoutSession:
    controller = get_session_registry().get(session_id, user.user_id)
    if controller is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "No active workout session with that id", "code": "session_not_found"},
        )
    return controller


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=SessionState,
    status_code=status.HTTP_201_CREATED,
    summary="Start a workout",
    description=(
        "Creates a workout_sessions row for the chosen workout and returns the "
        "session state with the sets of the first exercise."
    ),
    responses={
        201: {"description": "Session started"},
        401: {"description": "Authentication required"},
        404: {"description": "Workout not found or has no exercises"},
        500: {"description": "Session could not be created"},
    },
)
async def start_session(
    body: SessionStartRequest,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> SessionState:
    user = get_authenticated_user(authorization)
    controller = _new_controller(user)

    try:
        definition = await get_workout_service().get_definition(body.workout_id, user.user_id)
        state = await controller.start(definition)
    except WorkoutSessionError as exc:
        logger.warning("Could not start workout %s for user %s: %s", body.workout_id, user.user_id, exc)
        raise to_http_exception(exc) from exc

    get_session_registry().add(controller)
    return state


@router.get("/{session_id}", response_model=SessionState, summary="Current session state")
async def get_session(
    session_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> SessionState:
    user = get_authenticated_user(authorization)
    return _get_controller(session_id, user).state


@router.patch(
    "/{session_id}/sets/{set_index}",
    response_model=SessionState,
    summary="Edit a set field",
    description="Buffers weight, reps or rpe locally. Edits to completed sets are ignored.",
)
async def update_set(
    session_id: str,
    set_index: int,
    body: SetFieldUpdate,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> SessionState:
    user = get_authenticated_user(authorization)
    controller = _get_controller(session_id, user)
    try:
        controller.update_set_field(set_index, body.field, body.value)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc
    return controller.state


@router.post(
    "/{session_id}/sets/{set_index}/complete",
    response_model=SessionState,
    summary="Complete a set",
    description=(
        "Records the set in workout_session_sets and starts the rest timer "
        "unless it was the final set of the workout."
    ),
    responses={
        409: {"description": "Set already completed or being saved"},
        422: {"description": "Weight or reps missing"},
        500: {"description": "Set could not be saved; it stays editable"},
    },
)
async def complete_set(
    session_id: str,
    set_index: int,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> SessionState:
    user = get_authenticated_user(authorization)
    controller = _get_controller(session_id, user)
    try:
        await controller.complete_set(set_index)
    except WorkoutSessionError as exc:
        logger.warning("Set %d of session %s not completed: %s", set_index, session_id, exc)
        raise to_http_exception(exc) from exc
    return controller.state


@router.post("/{session_id}/rest/skip", response_model=SessionState, summary="Skip the rest")
async def skip_rest(
    session_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> SessionState:
    user = get_authenticated_user(authorization)
    controller = _get_controller(session_id, user)
    controller.skip_rest()
    return controller.state


@router.post("/{session_id}/rest/extend", response_model=SessionState, summary="Add rest time")
async def extend_rest(
    session_id: str,
    body: RestExtendRequest | None = None,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> SessionState:
    user = get_authenticated_user(authorization)
    controller = _get_controller(session_id, user)
    try:
        controller.extend_rest(body.seconds if body else None)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc
    return controller.state


@router.post(
    "/{session_id}/advance",
    response_model=AdvanceResponse,
    summary="Next exercise",
    description=(
        "Moves to the next exercise once every set is completed. On the last "
        "exercise this finishes the workout and returns the completion summary."
    ),
)
async def advance_exercise(
    session_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> AdvanceResponse:
    user = get_authenticated_user(authorization)
    controller = _get_controller(session_id, user)
    try:
        summary = await controller.advance_exercise()
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc

    if summary is not None:
        get_session_registry().discard(session_id)
    return AdvanceResponse(state=controller.state, summary=summary)


@router.post(
    "/{session_id}/finish",
    response_model=CompletionSummary,
    summary="Finish the workout",
    responses={500: {"description": "Completion could not be saved; retry is allowed"}},
)
async def finish_session(
    session_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> CompletionSummary:
    user = get_authenticated_user(authorization)
    controller = _get_controller(session_id, user)
    try:
        summary = await controller.finish()
    except WorkoutSessionError as exc:
        logger.warning("Session %s not finished: %s", session_id, exc)
        raise to_http_exception(exc) from exc

    get_session_registry().discard(session_id)
    return summary


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Exit the workout",
    description="Abandons the workout. Sets already saved are kept; the session stays incomplete.",
)
async def abort_session(
    session_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> Response:
    user = get_authenticated_user(authorization)
    controller = _get_controller(session_id, user)
    controller.abort()
    get_session_registry().discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
