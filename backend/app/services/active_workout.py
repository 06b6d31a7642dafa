"""
Active Workout Session
======================
Drives one workout from start to finish: buffers per-set input, records
completed sets, advances through the exercises and runs the rest
countdown between sets.

Lifecycle:
    not_started --start--> in_progress --finish--> finished
                                 |
                                 +-----abort-----> aborted

Persistence rules:
- Nothing local is committed until the matching Supabase write succeeds.
  A failed record_set leaves the set editable; a failed finish leaves
  the session in progress so the user can retry.
- abort() makes no network call. Sets already recorded stay attached to
  a session with no completed_at, which history shows as "incomplete".
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, Optional

from app.models.session import (
    CompletionSummary,
    SessionState,
    SessionStatus,
    SetCompletionResult,
    SetEntry,
)
from app.models.user import UserContext
from app.models.workout import ExercisePrescription, WorkoutDefinition
from app.services.errors import PersistenceError, PreconditionError, ValidationError
from app.services.rest_timer import RestTimer
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_REST_SECONDS = 60
DEFAULT_REST_EXTENSION_SECONDS = 30

RPE_MIN = 1
RPE_MAX = 10

SET_FIELDS = ("weight", "reps", "rpe")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def duration_in_minutes(started_at: datetime, ended_at: datetime) -> int:
    """Whole minutes between two instants, rounding half up."""
    minutes = (ended_at - started_at).total_seconds() / 60
    return max(0, int(math.floor(minutes + 0.5)))


def build_sets(prescription: ExercisePrescription) -> list[SetEntry]:
    """One fresh SetEntry per prescribed set, numbered from 1."""
    return [
        SetEntry(
            exercise_id=prescription.exercise_id,
            exercise_name=prescription.exercise_name,
            set_number=number,
            target_reps=prescription.reps,
            rest_seconds=prescription.rest_seconds,
        )
        for number in range(1, prescription.sets + 1)
    ]


class ActiveWorkoutSession:
    """Controller for a single in-progress workout.

    One instance per workout attempt; discard it once finished or aborted.
    When ``auto_countdown`` is True the controller owns an asyncio
    RestTimer that calls tick() every ``rest_tick_seconds``; otherwise the
    caller is responsible for calling tick().
    """

    def __init__(
        self,
        context: UserContext,
        store: SessionStore,
        *,
        default_rest_seconds: int = DEFAULT_REST_SECONDS,
        rest_extension_seconds: int = DEFAULT_REST_EXTENSION_SECONDS,
        rest_tick_seconds: float = 1.0,
        auto_countdown: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._context = context
        self._store = store
        self._default_rest_seconds = default_rest_seconds
        self._rest_extension_seconds = rest_extension_seconds
        self._clock = clock
        self._definition: Optional[WorkoutDefinition] = None
        self._state: Optional[SessionState] = None
        self._starting = False
        self._finishing = False
        self._pending_sets: set[int] = set()
        self._rest_timer: Optional[RestTimer] = (
            RestTimer(self._on_rest_tick, rest_tick_seconds) if auto_countdown else None
        )

    # ---- Read access -------------------------------------------------------

    @property
    def state(self) -> Optional[SessionState]:
        return self._state

    @property
    def status(self) -> SessionStatus:
        if self._state is None:
            return SessionStatus.NOT_STARTED
        return self._state.status

    @property
    def session_id(self) -> Optional[str]:
        return self._state.session_id if self._state else None

    @property
    def user_id(self) -> Optional[str]:
        return self._context.user_id

    @property
    def definition(self) -> Optional[WorkoutDefinition]:
        return self._definition

    @property
    def current_exercise(self) -> Optional[ExercisePrescription]:
        if self._definition is None or self._state is None:
            return None
        return self._definition.exercises[self._state.current_exercise_index]

    # ---- Lifecycle ---------------------------------------------------------

    async def start(self, definition: WorkoutDefinition) -> SessionState:
        """Create the session in Supabase and set up the first exercise."""
        if self.status is not SessionStatus.NOT_STARTED or self._starting:
            raise PreconditionError("Workout session has already been started", "already_started")
        if not definition.exercises:
            raise ValidationError("Workout has no exercises", "empty_workout")
        if not self._context.is_authenticated:
            raise PersistenceError("Not authenticated", "auth_required")

        started_at = self._clock()
        self._definition = definition
        self._state = SessionState(
            workout_id=definition.id,
            workout_name=definition.name,
            started_at=started_at,
            exercise_count=len(definition.exercises),
        )

        self._starting = True
        try:
            session_id = await self._store.create_session(
                self._context.user_id,
                definition.id,
                definition.name,
                started_at,
            )
        finally:
            self._starting = False

        if self._state.status is not SessionStatus.NOT_STARTED:
            raise PreconditionError("Workout session was closed during start", "session_closed")

        self._state.session_id = session_id
        self._state.status = SessionStatus.IN_PROGRESS
        self._state.current_exercise_index = 0
        self._state.sets = build_sets(definition.exercises[0])

        logger.info(
            "Started workout '%s' (session %s) for user %s",
            definition.name, session_id, self._context.user_id,
        )
        return self._state

    async def finish(self) -> CompletionSummary:
        """Finalize the session and return the completion summary."""
        state = self._require_in_progress()
        if self._finishing:
            raise PreconditionError("Workout is already being finished", "finish_pending")

        completed_at = self._clock()
        duration = duration_in_minutes(state.started_at, completed_at)

        self._finishing = True
        try:
            await self._store.finalize_session(state.session_id, completed_at, duration)
        finally:
            self._finishing = False

        if state.status is not SessionStatus.IN_PROGRESS:
            raise PreconditionError("Workout session was closed during finish", "session_closed")

        self._stop_rest()
        state.status = SessionStatus.FINISHED
        logger.info("Finished workout session %s in %d min", state.session_id, duration)

        return CompletionSummary(
            session_id=state.session_id,
            workout_name=state.workout_name,
            completed_at=completed_at,
            duration_minutes=duration,
            message=f"Great job! You completed {state.workout_name} in {duration} minutes.",
        )

    def abort(self) -> None:
        """Abandon the workout. No network call; recorded sets stay stored."""
        if self.status in (SessionStatus.FINISHED, SessionStatus.ABORTED):
            return
        self._stop_rest()
        if self._state is not None:
            self._state.status = SessionStatus.ABORTED
            logger.info("Aborted workout session %s", self._state.session_id)

    # ---- Set input ---------------------------------------------------------

    def update_set_field(self, set_index: int, field: str, value) -> None:
        """Buffer one input value for a set. Completed or saving sets are left as-is."""
        state = self._require_in_progress()
        entry = self._get_set(state, set_index)
        if entry.completed or set_index in self._pending_sets:
            logger.debug("Ignoring edit of completed set %d", set_index)
            return

        setattr(entry, field, _coerce_set_value(field, value))

    async def complete_set(self, set_index: int) -> SetCompletionResult:
        """Record a set and, unless it is the workout's final set, start resting."""
        state = self._require_in_progress()
        entry = self._get_set(state, set_index)

        if entry.completed:
            raise PreconditionError(f"Set {entry.set_number} is already completed", "set_completed")
        if set_index in self._pending_sets:
            raise PreconditionError(f"Set {entry.set_number} is already being saved", "set_pending")
        if entry.weight is None or entry.reps is None:
            raise ValidationError("missing weight/reps", "incomplete_set")

        self._pending_sets.add(set_index)
        try:
            await self._store.record_set(state.session_id, entry.model_copy())
        finally:
            self._pending_sets.discard(set_index)

        if state.status is not SessionStatus.IN_PROGRESS:
            raise PreconditionError("Workout session was closed while saving the set", "session_closed")

        entry.completed = True

        is_last_set = set_index == len(state.sets) - 1
        if is_last_set and state.is_last_exercise:
            return SetCompletionResult(set=entry, rest_started=False)

        # A prescribed rest of 0 (or none) falls back to the default.
        rest = entry.rest_seconds or self._default_rest_seconds
        self._start_rest(rest)
        return SetCompletionResult(set=entry, rest_started=True, rest_seconds=rest)

    async def advance_exercise(self) -> Optional[CompletionSummary]:
        """Move to the next exercise, or finish after the last one."""
        state = self._require_in_progress()
        if not state.all_sets_completed:
            raise PreconditionError(
                "Complete every set before moving on",
                "sets_incomplete",
            )

        if state.is_last_exercise:
            return await self.finish()

        next_index = state.current_exercise_index + 1
        state.current_exercise_index = next_index
        state.sets = build_sets(self._definition.exercises[next_index])
        logger.debug("Session %s advanced to exercise %d", state.session_id, next_index)
        return None

    # ---- Rest countdown ----------------------------------------------------

    def tick(self) -> None:
        """One second of rest has elapsed."""
        state = self._state
        if state is None or not state.is_resting:
            return
        state.rest_timer = max(0, state.rest_timer - 1)
        if state.rest_timer == 0:
            self._stop_rest()

    def skip_rest(self) -> None:
        self._stop_rest()

    def extend_rest(self, seconds: Optional[int] = None) -> None:
        """Add time to the running rest. No-op while not resting."""
        if seconds is None:
            seconds = self._rest_extension_seconds
        if seconds <= 0:
            raise ValidationError("Rest extension must be positive", "invalid_rest_extension")

        state = self._state
        if state is None or not state.is_resting:
            logger.debug("extend_rest ignored: not resting")
            return
        state.rest_timer += seconds

    def _start_rest(self, seconds: int) -> None:
        state = self._state
        state.rest_timer = seconds
        state.is_resting = True
        if self._rest_timer is not None:
            self._rest_timer.start()

    def _stop_rest(self) -> None:
        if self._rest_timer is not None:
            self._rest_timer.cancel()
        if self._state is not None:
            self._state.rest_timer = 0
            self._state.is_resting = False

    def _on_rest_tick(self) -> bool:
        self.tick()
        return self._state is not None and self._state.is_resting

    # ---- Helpers -----------------------------------------------------------

    def _require_in_progress(self) -> SessionState:
        if self._state is None or self._state.status is not SessionStatus.IN_PROGRESS:
            raise PreconditionError("Workout session is not in progress", "not_in_progress")
        return self._state

    @staticmethod
    def _get_set(state: SessionState, set_index: int) -> SetEntry:
        if not 0 <= set_index < len(state.sets):
            raise PreconditionError(f"No set at index {set_index}", "set_not_found")
        return state.sets[set_index]


def _coerce_set_value(field: str, value):
    """Validate a raw input value for *field*. None clears the field."""
    if field not in SET_FIELDS:
        raise ValidationError(f"Unknown set field '{field}'", "invalid_set_field")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number", "invalid_set_value")

    if field == "weight":
        if value < 0 or math.isnan(value) or math.isinf(value):
            raise ValidationError("weight must be zero or more", "invalid_set_value")
        return float(value)

    if field in ("reps", "rpe"):
        if isinstance(value, float) and not value.is_integer():
            raise ValidationError(f"{field} must be a whole number", "invalid_set_value")
        value = int(value)
        if field == "reps" and value < 1:
            raise ValidationError("reps must be at least 1", "invalid_set_value")
        if field == "rpe" and not RPE_MIN <= value <= RPE_MAX:
            raise ValidationError(f"rpe must be between {RPE_MIN} and {RPE_MAX}", "invalid_set_value")
        return value
