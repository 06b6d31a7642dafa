"""
History Service
===============
Past workout sessions, their recorded sets, and the profile stats card.

Streak rule: count consecutive calendar days (UTC) with at least one
completed session, walking back from the most recent such day. The
streak is only alive if that day is today or yesterday; otherwise it
is 0.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from app.db.supabase import get_supabase_client
from app.models.history import SessionHistoryItem, SessionSetRecord, UserStats
from app.services.errors import PersistenceError

logger = logging.getLogger(__name__)


class HistoryService:
    """Reads workout_sessions / workout_session_sets for one user."""

    def __init__(self) -> None:
        self._db = get_supabase_client()

    async def list_sessions(self, user_id: str, limit: Optional[int] = None) -> list[SessionHistoryItem]:
        """The user's sessions, newest first. Every session unless *limit* is given."""
        try:
            query = (
                self._db.table("workout_sessions")
                .select("*")
                .eq("user_id", user_id)
                .order("started_at", desc=True)
            )
            if limit is not None:
                query = query.limit(limit)
            result = query.execute()
        except Exception as exc:
            logger.error("Failed to load workout history for user %s: %s", user_id, exc)
            raise PersistenceError("Failed to load workout history") from exc

        return [SessionHistoryItem(**row) for row in result.data or []]

    async def get_session_sets(self, session_id: str, user_id: str) -> Optional[list[SessionSetRecord]]:
        """Sets recorded for one session. None if the session is not the user's."""
        try:
            owner = (
                self._db.table("workout_sessions")
                .select("id")
                .eq("id", session_id)
                .eq("user_id", user_id)
                .maybe_single()
                .execute()
            )
            if not owner or not owner.data:
                return None

            result = (
                self._db.table("workout_session_sets")
                .select("*")
                .eq("session_id", session_id)
                .order("created_at")
                .execute()
            )
        except Exception as exc:
            logger.error("Failed to load sets for session %s: %s", session_id, exc)
            raise PersistenceError("Failed to load session sets") from exc

        return [SessionSetRecord(**row) for row in result.data or []]

    async def get_stats(self, user_id: str, today: Optional[date] = None) -> UserStats:
        """Completed-workout count, total minutes, current streak and friend count."""
        try:
            result = (
                self._db.table("workout_sessions")
                .select("duration_minutes, completed_at")
                .eq("user_id", user_id)
                .not_.is_("completed_at", "null")
                .execute()
            )
            friendships = (
                self._db.table("friendships")
                .select("id")
                .or_(f"user1_id.eq.{user_id},user2_id.eq.{user_id}")
                .execute()
            )
        except Exception as exc:
            logger.error("Failed to load stats for user %s: %s", user_id, exc)
            raise PersistenceError("Failed to load workout stats") from exc

        sessions = [row for row in result.data or [] if row.get("completed_at")]
        completed_at = [_parse_timestamp(row["completed_at"]) for row in sessions]

        return UserStats(
            workouts_completed=len(sessions),
            total_workout_minutes=sum(row.get("duration_minutes") or 0 for row in sessions),
            friends_count=len(friendships.data or []),
            current_streak=calculate_workout_streak(
                completed_at,
                today or datetime.now(timezone.utc).date(),
            ),
        )


def calculate_workout_streak(completed_at: Iterable[datetime], today: date) -> int:
    days = sorted({ts.astimezone(timezone.utc).date() for ts in completed_at}, reverse=True)
    if not days or days[0] not in (today, today - timedelta(days=1)):
        return 0

    streak = 0
    expected = days[0]
    for day in days:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # Normalise to UTC if naive
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_service: HistoryService | None = None


def get_history_service() -> HistoryService:
    global _default_service
    if _default_service is None:
        _default_service = HistoryService()
    return _default_service
