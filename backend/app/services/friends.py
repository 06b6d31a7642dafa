"""
Friends Service
===============
User search, friend requests and friendships.

Tables:
- friend_requests: requester_id, receiver_id, status (pending | accepted | rejected)
- friendships:     one row per pair, stored with user1_id < user2_id so a
                   pair has exactly one lookup key whichever side asks

Relationship status of the caller towards another user, checked in order:
friends, pending_sent, pending_received, none.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from app.db.supabase import get_supabase_client
from app.models.friends import FriendRequest, FriendStatus, UserSearchResult
from app.services.errors import (
    FriendRequestNotFoundError,
    PersistenceError,
    PreconditionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

REQUESTS_TABLE = "friend_requests"
FRIENDSHIPS_TABLE = "friendships"

SEARCH_MIN_LENGTH = 3
SEARCH_LIMIT = 50

# Postgres unique_violation
_UNIQUE_VIOLATION = "23505"


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """(user1_id, user2_id) with the smaller id first."""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


def clean_search_query(query: str) -> str:
    return query.strip().lstrip("@").lower()


class FriendsService:
    """Reads and writes friend_requests / friendships for one caller."""

    def __init__(self) -> None:
        self._db = get_supabase_client()

    # ---- Search ------------------------------------------------------------

    async def search_users(self, user_id: str, query: str) -> list[UserSearchResult]:
        """Profiles matching username or full name, each with its friend status.

        Queries shorter than three characters return nothing.
        """
        cleaned = clean_search_query(query)
        if len(cleaned) < SEARCH_MIN_LENGTH:
            return []

        try:
            result = (
                self._db.table("profiles")
                .select("*")
                .neq("id", user_id)
                .or_(f"username.ilike.%{cleaned}%,full_name.ilike.%{cleaned}%")
                .order("created_at", desc=True)
                .limit(SEARCH_LIMIT)
                .execute()
            )
        except Exception as exc:
            logger.error("User search failed for %s: %s", user_id, exc)
            raise PersistenceError("Failed to search users") from exc

        return [
            UserSearchResult(
                **row,
                friend_status=await self.get_friend_status(user_id, row["id"]),
            )
            for row in result.data or []
        ]

    async def get_friend_status(self, user_id: str, target_id: str) -> FriendStatus:
        user1_id, user2_id = canonical_pair(user_id, target_id)
        try:
            friendship = (
                self._db.table(FRIENDSHIPS_TABLE)
                .select("id")
                .eq("user1_id", user1_id)
                .eq("user2_id", user2_id)
                .maybe_single()
                .execute()
            )
            if friendship and friendship.data:
                return "friends"

            if self._pending_request(user_id, target_id):
                return "pending_sent"
            if self._pending_request(target_id, user_id):
                return "pending_received"
        except Exception as exc:
            logger.error("Failed to read friend status %s -> %s: %s", user_id, target_id, exc)
            raise PersistenceError("Failed to load friend status") from exc

        return "none"

    def _pending_request(self, requester_id: str, receiver_id: str) -> Optional[dict]:
        result = (
            self._db.table(REQUESTS_TABLE)
            .select("id")
            .eq("requester_id", requester_id)
            .eq("receiver_id", receiver_id)
            .eq("status", "pending")
            .maybe_single()
            .execute()
        )
        return result.data if result else None

    # ---- Requests ----------------------------------------------------------

    async def send_request(self, user_id: str, receiver_id: str) -> FriendRequest:
        if receiver_id == user_id:
            raise ValidationError("You cannot send a friend request to yourself", "self_request")

        try:
            result = (
                self._db.table(REQUESTS_TABLE)
                .insert({
                    "requester_id": user_id,
                    "receiver_id": receiver_id,
                    "status": "pending",
                })
                .execute()
            )
        except Exception as exc:
            if getattr(exc, "code", None) == _UNIQUE_VIOLATION:
                raise PreconditionError(
                    "You've already sent a friend request to this user", "request_exists"
                ) from exc
            logger.error("Failed to send friend request %s -> %s: %s", user_id, receiver_id, exc)
            raise PersistenceError("Failed to send friend request") from exc

        if not result.data:
            raise PersistenceError("Failed to send friend request")

        logger.info("Friend request %s -> %s sent", user_id, receiver_id)
        return FriendRequest(**result.data[0])

    async def list_pending(self, user_id: str) -> list[FriendRequest]:
        """Pending requests addressed to the user, newest first, with the requester's profile."""
        try:
            result = (
                self._db.table(REQUESTS_TABLE)
                .select("*, requester:profiles!friend_requests_requester_id_fkey(*)")
                .eq("receiver_id", user_id)
                .eq("status", "pending")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            logger.error("Failed to load friend requests for %s: %s", user_id, exc)
            raise PersistenceError("Failed to load friend requests") from exc

        return [FriendRequest(**row) for row in result.data or []]

    async def accept_request(self, request_id: str, user_id: str) -> FriendRequest:
        """Accept a pending request and record the friendship."""
        request = self._resolve(request_id, user_id, "accepted")
        user1_id, user2_id = canonical_pair(request.requester_id, request.receiver_id)
        try:
            self._db.table(FRIENDSHIPS_TABLE).upsert(
                {"user1_id": user1_id, "user2_id": user2_id},
                on_conflict="user1_id,user2_id",
            ).execute()
        except Exception as exc:
            logger.error("Failed to record friendship %s/%s: %s", user1_id, user2_id, exc)
            raise PersistenceError("Failed to record friendship") from exc

        logger.info("Friend request %s accepted by %s", request_id, user_id)
        return request

    async def reject_request(self, request_id: str, user_id: str) -> FriendRequest:
        request = self._resolve(request_id, user_id, "rejected")
        logger.info("Friend request %s rejected by %s", request_id, user_id)
        return request

    def _resolve(self, request_id: str, user_id: str, new_status: str) -> FriendRequest:
        # Only the receiver may answer, and only while the request is pending
        try:
            result = (
                self._db.table(REQUESTS_TABLE)
                .update({
                    "status": new_status,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })
                .eq("id", request_id)
                .eq("receiver_id", user_id)
                .eq("status", "pending")
                .execute()
            )
        except Exception as exc:
            logger.error("Failed to update friend request %s: %s", request_id, exc)
            raise PersistenceError("Failed to update friend request") from exc

        if not result.data:
            raise FriendRequestNotFoundError(f"No pending friend request {request_id}")
        return FriendRequest(**result.data[0])

    # ---- Friendships -------------------------------------------------------

    async def count_friends(self, user_id: str) -> int:
        try:
            result = (
                self._db.table(FRIENDSHIPS_TABLE)
                .select("id")
                .or_(f"user1_id.eq.{user_id},user2_id.eq.{user_id}")
                .execute()
            )
        except Exception as exc:
            logger.error("Failed to count friends for %s: %s", user_id, exc)
            raise PersistenceError("Failed to load friends") from exc

        return len(result.data or [])


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_service: FriendsService | None = None


def get_friends_service() -> FriendsService:
    global _default_service
    if _default_service is None:
        _default_service = FriendsService()
    return _default_service
