"""
History Router
==============
GET /api/v1/history/sessions            — the user's sessions, newest first
GET /api/v1/history/sessions/{id}/sets  — sets recorded during one session
GET /api/v1/history/stats               — completed count, total minutes, streak

Abandoned sessions are listed with status "incomplete"; they never
received a completed_at.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query, status

from app.auth import get_authenticated_user
from app.models.history import SessionHistoryItem, SessionSetRecord, UserStats
from app.routers.errors import to_http_exception
from app.services.errors import WorkoutSessionError
from app.services.history import get_history_service

router = APIRouter(prefix="/api/v1/history", tags=["history"])


@router.get("/sessions", response_model=list[SessionHistoryItem], summary="Workout history")
async def list_sessions(
    limit: Optional[int] = Query(default=None, ge=1, description="Newest N sessions; all when omitted"),
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> list[SessionHistoryItem]:
    user = get_authenticated_user(authorization)
    try:
        return await get_history_service().list_sessions(user.user_id, limit=limit)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc


@router.get(
    "/sessions/{session_id}/sets",
    response_model=list[SessionSetRecord],
    summary="Sets of one session",
)
async def list_session_sets(
    session_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> list[SessionSetRecord]:
    user = get_authenticated_user(authorization)
    try:
        sets = await get_history_service().get_session_sets(session_id, user.user_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc

    if sets is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Workout session not found", "code": "session_not_found"},
        )
    return sets


@router.get("/stats", response_model=UserStats, summary="Profile workout stats")
async def get_stats(
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> UserStats:
    user = get_authenticated_user(authorization)
    try:
        return await get_history_service().get_stats(user.user_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc
