"""
Authentication
==============
Resolves the ``Authorization: Bearer <jwt>`` header into a UserContext.

The token is verified against Supabase Auth, then the caller's row in
``profiles`` is loaded. Routers pass the resulting context explicitly to
the services; there is no process-wide "current user".
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from app.db.supabase import get_supabase_client
from app.models.user import UserContext

logger = logging.getLogger(__name__)


def get_authenticated_user(authorization: str) -> UserContext:
    """Verify the JWT and return the caller's context.

    Raises HTTPException 401 if the token is invalid or missing, 404 if
    the user has no profile row.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Missing or invalid authorization header", "code": "auth_required"},
        )

    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Empty bearer token", "code": "auth_required"},
        )

    db = get_supabase_client()

    try:
        auth_response = db.auth.get_user(token)
    except Exception as exc:
        logger.warning("Auth token verification failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid or expired token", "code": "auth_invalid"},
        ) from exc

    if not auth_response or not auth_response.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "User not found for token", "code": "auth_invalid"},
        )

    user_id = auth_response.user.id

    result = (
        db.table("profiles")
        .select("id, username, full_name")
        .eq("id", user_id)
        .maybe_single()
        .execute()
    )

    if not result or not result.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "User profile not found", "code": "user_not_found"},
        )

    return UserContext(
        user_id=result.data["id"],
        username=result.data.get("username"),
        full_name=result.data.get("full_name"),
    )
