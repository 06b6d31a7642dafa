"""
Session Registry
================
In-process home of the live ActiveWorkoutSession controllers, keyed by
session id. A controller is registered once start() succeeds and is
dropped when the workout is finished or aborted.

Workouts the app never closes are reclaimed two ways:
- A user has at most one live session. Registering a new one aborts and
  drops the previous one.
- A session not touched for ``idle_timeout_seconds`` is aborted and
  dropped on the next add().
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from app.config import get_settings
from app.services.active_workout import ActiveWorkoutSession

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TIMEOUT_SECONDS = 4 * 60 * 60


class SessionRegistry:
    def __init__(
        self,
        idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._idle_timeout_seconds = idle_timeout_seconds
        self._clock = clock
        self._sessions: dict[str, ActiveWorkoutSession] = {}
        self._last_touched: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, controller: ActiveWorkoutSession) -> None:
        session_id = controller.session_id
        if not session_id:
            raise ValueError("Only started sessions can be registered")

        self.evict_idle()
        for existing_id, existing in list(self._sessions.items()):
            if existing.user_id == controller.user_id and existing_id != session_id:
                logger.info(
                    "User %s started a new workout; closing session %s",
                    controller.user_id, existing_id,
                )
                self._close(existing_id)

        self._sessions[session_id] = controller
        self._last_touched[session_id] = self._clock()

    def get(self, session_id: str, user_id: str) -> Optional[ActiveWorkoutSession]:
        """Return the live controller, or None if absent or owned by someone else."""
        controller = self._sessions.get(session_id)
        if controller is None or controller.user_id != user_id:
            return None
        self._last_touched[session_id] = self._clock()
        return controller

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_touched.pop(session_id, None)

    def evict_idle(self) -> int:
        """Abort and drop sessions idle for longer than the timeout."""
        cutoff = self._clock() - self._idle_timeout_seconds
        stale = [sid for sid, touched in self._last_touched.items() if touched < cutoff]
        for session_id in stale:
            self._close(session_id)
        if stale:
            logger.info("Evicted %d idle workout session(s)", len(stale))
        return len(stale)

    def close_all(self) -> None:
        """Abort every live session. Called on application shutdown."""
        for controller in self._sessions.values():
            controller.abort()
        if self._sessions:
            logger.info("Closed %d live workout session(s)", len(self._sessions))
        self._sessions.clear()
        self._last_touched.clear()

    def _close(self, session_id: str) -> None:
        controller = self._sessions.get(session_id)
        if controller is not None:
            controller.abort()
        self.discard(session_id)


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = SessionRegistry(get_settings().session_idle_timeout_seconds)
    return _default_registry
