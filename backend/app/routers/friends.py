"""
Friends Router
==============
GET  /api/v1/friends/search?q=...                  — users matching q, with friend status
GET  /api/v1/friends/status/{user_id}              — caller's relationship to one user
GET  /api/v1/friends/requests                      — pending requests sent to the caller
POST /api/v1/friends/requests                      — send a request
POST /api/v1/friends/requests/{request_id}/accept  — accept; records the friendship
POST /api/v1/friends/requests/{request_id}/reject  — reject
"""

from __future__ import annotations

from fastapi import APIRouter, Header, Query, status

from app.auth import get_authenticated_user
from app.models.friends import FriendRequest, FriendRequestCreate, FriendStatus, UserSearchResult
from app.routers.errors import to_http_exception
from app.services.errors import WorkoutSessionError
from app.services.friends import get_friends_service

router = APIRouter(prefix="/api/v1/friends", tags=["friends"])


@router.get("/search", response_model=list[UserSearchResult], summary="Search users")
async def search_users(
    q: str = Query(..., description="Username or full name; a leading @ is ignored"),
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> list[UserSearchResult]:
    user = get_authenticated_user(authorization)
    try:
        return await get_friends_service().search_users(user.user_id, q)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc


@router.get("/status/{target_id}", summary="Relationship status")
async def get_friend_status(
    target_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> dict:
    user = get_authenticated_user(authorization)
    try:
        friend_status: FriendStatus = await get_friends_service().get_friend_status(user.user_id, target_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc
    return {"user_id": target_id, "friend_status": friend_status}


@router.get("/requests", response_model=list[FriendRequest], summary="Pending friend requests")
async def list_requests(
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> list[FriendRequest]:
    user = get_authenticated_user(authorization)
    try:
        return await get_friends_service().list_pending(user.user_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc


@router.post(
    "/requests",
    response_model=FriendRequest,
    status_code=status.HTTP_201_CREATED,
    summary="Send a friend request",
    responses={
        409: {"description": "A request to this user already exists"},
        422: {"description": "Request addressed to yourself"},
    },
)
async def send_request(
    body: FriendRequestCreate,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> FriendRequest:
    user = get_authenticated_user(authorization)
    try:
        return await get_friends_service().send_request(user.user_id, body.receiver_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc


@router.post("/requests/{request_id}/accept", response_model=FriendRequest, summary="Accept a request")
async def accept_request(
    request_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> FriendRequest:
    user = get_authenticated_user(authorization)
    try:
        return await get_friends_service().accept_request(request_id, user.user_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc


@router.post("/requests/{request_id}/reject", response_model=FriendRequest, summary="Reject a request")
async def reject_request(
    request_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> FriendRequest:
    user = get_authenticated_user(authorization)
    try:
        return await get_friends_service().reject_request(request_id, user.user_id)
    except WorkoutSessionError as exc:
        raise to_http_exception(exc) from exc
