"""
Session Store
=============
Persistence calls made by the active-workout controller:

- create_session():   insert a workout_sessions row, return its id
- record_set():       insert a completed workout_session_sets row
- finalize_session(): stamp completed_at + duration_minutes on the session

Every Supabase failure (exception or empty result) is re-raised as a
PersistenceError so the controller never commits local state for a
write that did not land.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from app.db.supabase import get_supabase_client
from app.models.session import SetEntry
from app.services.errors import PersistenceError

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "workout_sessions"
SETS_TABLE = "workout_session_sets"


class SessionStore:
    """Writes workout sessions and their sets to Supabase."""

    def __init__(self) -> None:
        self._db = get_supabase_client()

    async def create_session(
        self,
        user_id: str,
        workout_id: str,
        workout_name: str,
        started_at: datetime,
    ) -> str:
        """Insert a new in-progress session and return its id."""
        row = {
            "user_id": user_id,
            "workout_id": workout_id,
            "workout_name": workout_name,
            "started_at": started_at.isoformat(),
        }
        data = self._execute(
            lambda: self._db.table(SESSIONS_TABLE).insert(row).execute(),
            "create workout session",
        )
        session_id = data[0].get("id")
        if not session_id:
            raise PersistenceError("Workout session was created without an id")

        logger.info("Created workout session %s for user %s", session_id, user_id)
        return str(session_id)

    async def record_set(self, session_id: str, entry: SetEntry) -> None:
        """Insert one completed set for *session_id*."""
        row = {
            "session_id": session_id,
            "exercise_id": entry.exercise_id,
            "exercise_name": entry.exercise_name,
            "set_number": entry.set_number,
            "weight_lbs": entry.weight,
            "reps": entry.reps,
            "rpe": entry.rpe,
            "completed": True,
        }
        self._execute(
            lambda: self._db.table(SETS_TABLE).insert(row).execute(),
            "record set",
        )
        logger.debug(
            "Recorded set %d of %s for session %s",
            entry.set_number, entry.exercise_name, session_id,
        )

    async def finalize_session(
        self,
        session_id: str,
        completed_at: datetime,
        duration_minutes: int,
        notes: Optional[str] = None,
    ) -> None:
        """Mark the session complete."""
        update = {
            "completed_at": completed_at.isoformat(),
            "duration_minutes": duration_minutes,
        }
        if notes:
            update["notes"] = notes
        self._execute(
            lambda: self._db.table(SESSIONS_TABLE).update(update).eq("id", session_id).execute(),
            "finalize workout session",
        )
        logger.info("Finalized workout session %s (%d min)", session_id, duration_minutes)

    # ------------------------------------------------------------------

    @staticmethod
    def _execute(call, action: str) -> list[dict]:
        try:
            result = call()
        except Exception as exc:
            logger.error("Failed to %s: %s", action, exc)
            raise PersistenceError(f"Failed to {action}") from exc

        if not result.data:
            logger.error("Failed to %s: no rows returned", action)
            raise PersistenceError(f"Failed to {action}")
        return result.data


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    global _default_store
    if _default_store is None:
        _default_store = SessionStore()
    return _default_store
